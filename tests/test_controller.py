"""
Tests for the evolution controller.

Verifies:
  - set_level accepts every level and rejects out-of-range values untouched
  - advance_if_gates_pass moves exactly one level when the gate passes
  - A single false check blocks the advance and is the only failure listed
  - Warn-only fact sets advance
  - The terminal level is a no-op
  - auto_advance fires only from one level below, without gate evaluation
  - allow_skip climbs until the first failing gate
  - Storage errors propagate
"""

from __future__ import annotations

from pathlib import Path
from typing import Dict

import pytest

from evolution_framework.config import MAX_LEVEL
from evolution_framework.engine.controller import EvolutionController
from evolution_framework.engine.state_store import LevelStateStore
from evolution_framework.errors import InvalidLevelError, StorageError
from evolution_framework.inspector.base_inspector import StaticInspector
from evolution_framework.schemas import CheckName, FactSet

_BOOLEAN_CHECKS = [
    "tests",
    "lint",
    "docs",
    "agent_review",
    "integration_tests",
    "e2e_tests",
    "security_audit",
]


def _all_passing() -> Dict[str, bool]:
    return {name: True for name in _BOOLEAN_CHECKS}


def _controller(tmp_path: Path, facts=None, **kwargs) -> EvolutionController:
    return EvolutionController(
        store=LevelStateStore(state_path=tmp_path / ".evolution"),
        inspector=StaticInspector(facts),
        **kwargs,
    )


class TestSetLevel:

    @pytest.mark.parametrize("level", range(0, MAX_LEVEL + 1))
    def test_status_reports_set_level(self, tmp_path: Path, level: int):
        controller = _controller(tmp_path)
        controller.set_level(level)
        assert controller.status().current_level == level

    @pytest.mark.parametrize("bad", [-1, MAX_LEVEL + 1, True, "2"])
    def test_out_of_range_rejected_state_unchanged(self, tmp_path: Path, bad):
        controller = _controller(tmp_path)
        controller.set_level(2)
        before = controller.store.read()

        with pytest.raises(InvalidLevelError):
            controller.set_level(bad)

        assert controller.store.read() == before

    def test_set_level_skips_gates(self, tmp_path: Path):
        controller = _controller(tmp_path, facts={"tests": False, "lint": False, "docs": False})
        controller.set_level(4)
        assert controller.status().current_level == 4
        assert controller.inspector.calls == 0


class TestStatus:

    def test_default_status(self, tmp_path: Path):
        status = _controller(tmp_path).status()
        assert status.current_level == 0
        assert status.level_name == "Basic Usage"
        assert status.next_level == 1
        assert status.next_level_name == "CLAUDE.md"
        assert status.updated_at is None

    def test_terminal_status(self, tmp_path: Path):
        controller = _controller(tmp_path)
        controller.set_level(MAX_LEVEL)
        status = controller.status()
        assert status.is_terminal
        assert status.next_level_name is None

    def test_status_is_idempotent(self, tmp_path: Path):
        controller = _controller(tmp_path)
        controller.set_level(3)
        assert controller.status() == controller.status()


class TestAdvance:

    @pytest.mark.parametrize("level", range(0, MAX_LEVEL + 1))
    def test_passing_gate_moves_one_level(self, tmp_path: Path, level: int):
        controller = _controller(tmp_path, facts=_all_passing())
        controller.set_level(level)

        result = controller.advance_if_gates_pass()

        assert result.to_level == min(level + 1, MAX_LEVEL)
        assert controller.status().current_level == min(level + 1, MAX_LEVEL)
        assert result.reason == []

    def test_single_false_check_blocks(self, tmp_path: Path):
        facts = _all_passing()
        facts["agent_review"] = False
        controller = _controller(tmp_path, facts=facts)
        controller.set_level(3)

        result = controller.advance_if_gates_pass()

        assert result.advanced is False
        assert controller.status().current_level == 3
        assert result.report.failing_checks == [CheckName.AGENT_REVIEW]
        assert result.reason == [CheckName.AGENT_REVIEW]

    def test_level_one_docs_missing_stays(self, tmp_path: Path):
        controller = _controller(tmp_path)
        controller.set_level(1)

        result = controller.advance_if_gates_pass(FactSet.from_mapping({"lint": True, "docs": False}))

        assert controller.status().current_level == 1
        assert [(r.check.value, r.outcome.value) for r in result.report.results] == [
            ("lint", "pass"),
            ("docs", "fail"),
        ]
        assert result.report.all_passed is False

    def test_warn_only_advances(self, tmp_path: Path):
        controller = _controller(tmp_path, facts={})
        controller.set_level(2)

        result = controller.advance_if_gates_pass()

        assert result.report.all_passed is True
        assert len(result.report.warnings) == 3
        assert result.to_level == 3
        assert controller.status().current_level == 3

    def test_terminal_advance_does_not_write(self, tmp_path: Path):
        controller = _controller(tmp_path, facts=_all_passing())
        controller.set_level(MAX_LEVEL)
        before = controller.store.read()

        result = controller.advance_if_gates_pass()

        assert result.advanced is False
        assert controller.store.read() == before

    def test_refused_advance_does_not_write(self, tmp_path: Path):
        controller = _controller(tmp_path, facts={"lint": False})
        controller.set_level(1)
        before = controller.store.read()

        controller.advance_if_gates_pass()

        assert controller.store.read() == before

    def test_inspector_used_when_no_facts(self, tmp_path: Path):
        controller = _controller(tmp_path, facts=_all_passing())
        controller.advance_if_gates_pass()
        assert controller.inspector.calls == 1

    def test_explicit_facts_bypass_inspector(self, tmp_path: Path):
        controller = _controller(tmp_path)
        controller.advance_if_gates_pass(FactSet())
        assert controller.inspector.calls == 0

    def test_check_does_not_change_level(self, tmp_path: Path):
        controller = _controller(tmp_path, facts=_all_passing())
        controller.set_level(2)
        report = controller.check()
        assert report.level == 2
        assert report.all_passed is True
        assert controller.status().current_level == 2


class TestAllowSkip:

    def test_climbs_to_terminal_when_everything_passes(self, tmp_path: Path):
        controller = _controller(tmp_path, facts=_all_passing(), allow_skip=True)
        result = controller.advance_if_gates_pass()
        assert result.to_level == MAX_LEVEL

    def test_stops_at_first_failing_gate(self, tmp_path: Path):
        controller = _controller(
            tmp_path,
            facts={"lint": True, "docs": True, "tests": False},
            allow_skip=True,
        )
        result = controller.advance_if_gates_pass()

        assert result.from_level == 0
        assert result.to_level == 2
        assert result.reason == [CheckName.TESTS]
        assert controller.status().current_level == 2

    def test_default_is_no_skip(self, tmp_path: Path):
        controller = _controller(tmp_path, facts=_all_passing())
        assert controller.advance_if_gates_pass().to_level == 1


class TestAutoAdvance:

    def test_fires_from_one_below_without_gates(self, tmp_path: Path):
        controller = _controller(tmp_path, facts={"tests": True, "lint": True, "docs": True})
        controller.set_level(1)

        assert controller.auto_advance(2) is True
        assert controller.status().current_level == 2
        assert controller.inspector.calls == 0

    def test_fires_even_when_gate_would_fail(self, tmp_path: Path):
        controller = _controller(tmp_path, facts={"lint": False, "docs": False})
        assert controller.auto_advance(1) is True
        assert controller.status().current_level == 1

    @pytest.mark.parametrize("current", [0, 2, 3, MAX_LEVEL])
    def test_no_op_unless_exactly_one_below(self, tmp_path: Path, current: int):
        controller = _controller(tmp_path)
        controller.set_level(current)
        before = controller.store.read()

        assert controller.auto_advance(2) is False
        assert controller.store.read() == before

    @pytest.mark.parametrize("target", [0, -1, MAX_LEVEL + 1])
    def test_invalid_target(self, tmp_path: Path, target: int):
        with pytest.raises(InvalidLevelError):
            _controller(tmp_path).auto_advance(target)


class TestStorageErrors:

    def test_corrupt_state_propagates(self, tmp_path: Path):
        (tmp_path / ".evolution").write_text("garbage")
        controller = _controller(tmp_path, facts=_all_passing())

        with pytest.raises(StorageError):
            controller.advance_if_gates_pass()
        with pytest.raises(StorageError):
            controller.status()

    def test_unwritable_state_propagates(self, tmp_path: Path):
        blocker = tmp_path / "blocker"
        blocker.write_text("file")
        controller = EvolutionController(
            store=LevelStateStore(state_path=blocker / ".evolution"),
            inspector=StaticInspector(_all_passing()),
        )

        with pytest.raises(StorageError):
            controller.advance_if_gates_pass()
        with pytest.raises(StorageError):
            controller.set_level(1)
