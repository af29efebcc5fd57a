"""
Tests for schemas.

Verifies:
  - coerce_fact maps bool/number/None to tagged facts, bool before number
  - FactSet.get treats missing checks as unknown
  - Facts survive a JSON round-trip through the discriminated union
  - ProjectState reads and writes the camelCase keys
"""

from __future__ import annotations

from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from evolution_framework.schemas import (
    BoolFact,
    CheckName,
    FactSet,
    NumberFact,
    ProjectState,
    UnknownFact,
    coerce_fact,
)


class TestCoerceFact:

    def test_bool_is_not_a_number(self):
        assert coerce_fact(True) == BoolFact(value=True)
        assert coerce_fact(False) == BoolFact(value=False)

    def test_numbers(self):
        assert coerce_fact(3) == NumberFact(value=3.0)
        assert coerce_fact(72.5) == NumberFact(value=72.5)

    def test_none_is_unknown(self):
        assert isinstance(coerce_fact(None), UnknownFact)

    def test_unsupported_value(self):
        with pytest.raises(TypeError):
            coerce_fact("yes")


class TestFactSet:

    def test_missing_check_is_unknown(self):
        facts = FactSet.from_mapping({"tests": True})
        assert isinstance(facts.get(CheckName.LINT), UnknownFact)
        assert facts.get("tests") == BoolFact(value=True)

    def test_unknown_check_name_rejected(self):
        with pytest.raises(ValueError):
            FactSet.from_mapping({"benchmarks": True})

    def test_json_round_trip_keeps_kinds(self):
        facts = FactSet.from_mapping(
            {"tests": True, "coverage": 81.0, "docs": None},
            file_line_counts={"a.py": 12},
        )
        restored = FactSet.model_validate(facts.model_dump(mode="json"))
        assert restored == facts


class TestProjectState:

    def test_serializes_camel_case(self):
        state = ProjectState(
            current_level=2,
            updated_at=datetime(2026, 1, 1, tzinfo=timezone.utc),
        )
        dumped = state.model_dump(mode="json", by_alias=True)
        assert dumped == {"currentLevel": 2, "updatedAt": "2026-01-01T00:00:00Z"}

    def test_naive_timestamp_assumed_utc(self):
        state = ProjectState.model_validate({"currentLevel": 1, "updatedAt": "2026-01-01T00:00:00"})
        assert state.updated_at.tzinfo == timezone.utc

    def test_level_out_of_range(self):
        with pytest.raises(ValidationError):
            ProjectState.model_validate({"currentLevel": 6})
