"""
LangGraph definition for the evolve pipeline.

    inspect_project -> evaluate_gates -> [conditional] -> promote_level -> END

The graph gathers facts once, evaluates the current level's gate, and
only reaches promote_level when the gate passed and the project is not
at the terminal level. All transition rules stay in EvolutionController;
the nodes only sequence its calls.

Storage errors are not caught here: they propagate out of invoke().
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional, TypedDict

from langgraph.graph import END, StateGraph

from evolution_framework.config import MAX_LEVEL
from evolution_framework.engine.controller import EvolutionController
from evolution_framework.schemas import FactSet, GateReport

logger = logging.getLogger(__name__)


class EvolveState(TypedDict):
    """State that flows through the evolve graph."""
    facts: Optional[Dict[str, Any]]
    level: int
    report: Optional[Dict[str, Any]]
    advanced: bool


def build_evolution_graph(controller: EvolutionController):
    """
    Construct and compile the evolve graph bound to `controller`.

    Returns a compiled StateGraph ready to invoke with initial_state().
    """

    def _inspect_project_node(state: EvolveState) -> EvolveState:
        facts = controller.inspector.inspect()
        state["facts"] = facts.model_dump(mode="json")
        logger.info("Evolve: facts gathered by %r", controller.inspector)
        return state

    def _evaluate_gates_node(state: EvolveState) -> EvolveState:
        report = controller.check(FactSet.model_validate(state["facts"]))
        state["level"] = report.level
        state["report"] = report.model_dump(mode="json")
        logger.info(
            "Evolve: level %d gate %s",
            report.level,
            "PASSED" if report.all_passed else "FAILED",
        )
        return state

    def _should_promote(state: EvolveState) -> str:
        report = GateReport.model_validate(state["report"])
        if report.all_passed and state["level"] < MAX_LEVEL:
            return "promote_level"
        return END

    def _promote_level_node(state: EvolveState) -> EvolveState:
        result = controller.advance_if_gates_pass(FactSet.model_validate(state["facts"]))
        state["advanced"] = result.advanced
        state["level"] = result.to_level
        state["report"] = result.report.model_dump(mode="json")
        logger.info("Evolve: promoted to level %d", result.to_level)
        return state

    workflow = StateGraph(EvolveState)

    workflow.add_node("inspect_project", _inspect_project_node)
    workflow.add_node("evaluate_gates", _evaluate_gates_node)
    workflow.add_node("promote_level", _promote_level_node)

    workflow.set_entry_point("inspect_project")
    workflow.add_edge("inspect_project", "evaluate_gates")
    workflow.add_conditional_edges("evaluate_gates", _should_promote)
    workflow.add_edge("promote_level", END)

    compiled = workflow.compile()
    logger.info(
        "Evolve graph compiled: inspect_project -> evaluate_gates -> "
        "[conditional] -> promote_level -> END"
    )
    return compiled


def initial_state() -> EvolveState:
    return {
        "facts": None,
        "level": 0,
        "report": None,
        "advanced": False,
    }
