"""
Evolution controller -- the level state machine.

States are levels 0..MAX_LEVEL. Transitions:
  - advance_if_gates_pass: checked, one level per call (unless allow_skip)
  - set_level: unchecked operator override, range-validated
  - auto_advance: unchecked single step, fired by generating a level's
    defining document while one level below it

Every transition reads state, decides, then writes. Nothing is written
when a check fails or a level is rejected.
"""

from __future__ import annotations

import logging
from typing import Optional

from evolution_framework.config import ALLOW_SKIP, MAX_LEVEL
from evolution_framework.engine.gate_evaluator import evaluate
from evolution_framework.engine.levels import get_level, next_level, validate_level
from evolution_framework.engine.state_store import LevelStateStore
from evolution_framework.inspector.base_inspector import BaseInspector
from evolution_framework.schemas import (
    AdvanceResult,
    FactSet,
    GateReport,
    GateThresholds,
    LevelStatus,
    ProjectState,
)

logger = logging.getLogger(__name__)


class EvolutionController:
    """Owns the level transitions of one project."""

    def __init__(
        self,
        store: LevelStateStore,
        inspector: BaseInspector,
        thresholds: GateThresholds | None = None,
        allow_skip: bool = ALLOW_SKIP,
    ) -> None:
        self.store = store
        self.inspector = inspector
        self.thresholds = thresholds or GateThresholds()
        self.allow_skip = allow_skip

    # ------------------------------------------------------------------
    # Read-only
    # ------------------------------------------------------------------

    def status(self) -> LevelStatus:
        """Current level, its name, and what comes next. No state change."""
        state = self.store.read()
        level = get_level(state.current_level)
        upcoming = next_level(level.number)
        return LevelStatus(
            current_level=level.number,
            level_name=level.name,
            next_level=upcoming.number if upcoming else None,
            next_level_name=upcoming.name if upcoming else None,
            updated_at=state.updated_at,
        )

    def check(self, facts: Optional[FactSet] = None) -> GateReport:
        """Evaluate the current level's gate. No state change."""
        state = self.store.read()
        return evaluate(get_level(state.current_level), self._facts(facts), self.thresholds)

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def advance_if_gates_pass(self, facts: Optional[FactSet] = None) -> AdvanceResult:
        """
        Move up one level if the current level's gate passes.

        A failing gate leaves the level unchanged and names the failing
        checks in the result. At MAX_LEVEL this is a no-op.

        Args:
            facts: Snapshot to evaluate. Taken from the inspector if omitted.

        Returns:
            AdvanceResult with the report of the last gate evaluated.
        """
        snapshot = self._facts(facts)
        start = self.store.read().current_level
        report = evaluate(get_level(start), snapshot, self.thresholds)
        target = start

        while report.all_passed and target < MAX_LEVEL:
            target += 1
            if not self.allow_skip or target == MAX_LEVEL:
                break
            report = evaluate(get_level(target), snapshot, self.thresholds)

        if target == start:
            if start == MAX_LEVEL and report.all_passed:
                logger.info("Level %d is terminal; nothing to advance to.", start)
            else:
                logger.info(
                    "Advance refused at level %d: failing checks %s",
                    start,
                    [c.value for c in report.failing_checks],
                )
            return AdvanceResult(
                from_level=start,
                to_level=start,
                report=report,
                reason=report.failing_checks,
            )

        self.store.write(target)
        logger.info(
            "Advanced from level %d to %d: %s",
            start,
            target,
            get_level(target).name,
        )
        return AdvanceResult(
            from_level=start,
            to_level=target,
            report=report,
            reason=report.failing_checks,
        )

    def set_level(self, target: int) -> ProjectState:
        """
        Set the level directly, without evaluating any gate.

        Raises:
            InvalidLevelError: `target` is outside 0..MAX_LEVEL. Nothing is written.
        """
        validate_level(target)
        state = self.store.write(target)
        logger.info("Level set to %d: %s", target, get_level(target).name)
        return state

    def auto_advance(self, target: int) -> bool:
        """
        Step to `target` if the project sits exactly one level below it.

        Used after a level's defining document is generated. Runs no gate
        and never skips a level.

        Returns:
            True if the level changed.

        Raises:
            InvalidLevelError: `target` is outside 1..MAX_LEVEL.
        """
        validate_level(target, low=1)
        current = self.store.read().current_level
        if current != target - 1:
            logger.info(
                "Auto-advance to level %d skipped: project is at level %d.",
                target,
                current,
            )
            return False

        self.store.write(target)
        logger.info("Auto-advanced from level %d to %d.", current, target)
        return True

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _facts(self, facts: Optional[FactSet]) -> FactSet:
        if facts is not None:
            return facts
        logger.debug("Gathering facts with %r", self.inspector)
        return self.inspector.inspect()
