"""
Strict schemas for the evolution framework.
All data flowing through the system must conform to these Pydantic models.
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Annotated, Any, Dict, List, Literal, Mapping, Optional, Tuple, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from evolution_framework.config import (
    MAX_COMPLEXITY,
    MAX_FILE_LINES,
    MAX_LEVEL,
    MIN_COVERAGE_PCT,
)


# ──────────────────────────────────────────────
# Checks
# ──────────────────────────────────────────────

class CheckName(str, Enum):
    """Closed set of requirements a level can declare."""
    TESTS = "tests"
    LINT = "lint"
    DOCS = "docs"
    AGENT_REVIEW = "agent_review"
    INTEGRATION_TESTS = "integration_tests"
    E2E_TESTS = "e2e_tests"
    SECURITY_AUDIT = "security_audit"
    COVERAGE = "coverage"
    FILE_LENGTH = "file_length"
    COMPLEXITY = "complexity"
    RISKY_PATTERNS = "risky_patterns"


class CheckKind(str, Enum):
    BOOLEAN = "boolean"
    AT_LEAST = "at_least"  # numeric, value >= threshold passes
    AT_MOST = "at_most"  # numeric, value <= threshold passes
    ADVISORY = "advisory"  # boolean, False warns instead of failing


class CheckDefinition(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: CheckName
    description: str
    kind: CheckKind = CheckKind.BOOLEAN


class Outcome(str, Enum):
    PASS = "pass"
    FAIL = "fail"
    WARN = "warn"  # Could not be verified; reported, never blocking


# ──────────────────────────────────────────────
# Facts  (supplied by a ProjectInspector)
# ──────────────────────────────────────────────

class BoolFact(BaseModel):
    model_config = ConfigDict(frozen=True)
    kind: Literal["bool"] = "bool"
    value: bool


class NumberFact(BaseModel):
    model_config = ConfigDict(frozen=True)
    kind: Literal["number"] = "number"
    value: float


class UnknownFact(BaseModel):
    model_config = ConfigDict(frozen=True)
    kind: Literal["unknown"] = "unknown"


FactValue = Annotated[Union[BoolFact, NumberFact, UnknownFact], Field(discriminator="kind")]

UNKNOWN = UnknownFact()


def coerce_fact(raw: Any) -> Union[BoolFact, NumberFact, UnknownFact]:
    """Turn a plain Python value (bool, number, None) into a tagged fact."""
    if isinstance(raw, (BoolFact, NumberFact, UnknownFact)):
        return raw
    if raw is None:
        return UNKNOWN
    # bool is an int subclass, test it first
    if isinstance(raw, bool):
        return BoolFact(value=raw)
    if isinstance(raw, (int, float)):
        return NumberFact(value=float(raw))
    raise TypeError(f"Unsupported fact value: {raw!r}")


class FactSet(BaseModel):
    """
    Complete snapshot of what is known about a project.

    A check missing from `values` is unknown, never false.
    """
    model_config = ConfigDict(frozen=True)

    values: Dict[CheckName, FactValue] = Field(default_factory=dict)
    file_line_counts: Dict[str, int] = Field(
        default_factory=dict,
        description="Line count per measured source file, relative paths",
    )
    pattern_findings: Dict[str, List[str]] = Field(
        default_factory=dict,
        description="Risky patterns found per scanned source file, relative paths",
    )

    def get(self, check: Union[CheckName, str]) -> Union[BoolFact, NumberFact, UnknownFact]:
        return self.values.get(CheckName(check), UNKNOWN)

    @classmethod
    def from_mapping(
        cls,
        mapping: Mapping[Union[CheckName, str], Any],
        file_line_counts: Optional[Mapping[str, int]] = None,
        pattern_findings: Optional[Mapping[str, List[str]]] = None,
    ) -> "FactSet":
        return cls(
            values={CheckName(k): coerce_fact(v) for k, v in mapping.items()},
            file_line_counts=dict(file_line_counts or {}),
            pattern_findings={path: list(found) for path, found in (pattern_findings or {}).items()},
        )


# ──────────────────────────────────────────────
# Levels
# ──────────────────────────────────────────────

class Level(BaseModel):
    """One maturity stage. Defined statically, never created at runtime."""
    model_config = ConfigDict(frozen=True)

    number: int = Field(..., ge=0, le=MAX_LEVEL)
    name: str
    slug: str
    required_checks: Tuple[CheckName, ...] = ()
    document: Optional[str] = Field(None, description="File whose generation defines this level")


class GateThresholds(BaseModel):
    """Limits applied to numeric checks. Both bounds are inclusive."""
    min_coverage: float = Field(MIN_COVERAGE_PCT, ge=0.0, le=100.0)
    max_file_lines: int = Field(MAX_FILE_LINES, ge=1)
    max_complexity: int = Field(MAX_COMPLEXITY, ge=1)


# ──────────────────────────────────────────────
# Gate Report
# ──────────────────────────────────────────────

class CheckResult(BaseModel):
    check: CheckName
    outcome: Outcome
    detail: str = ""


class GateReport(BaseModel):
    """Evaluation of one gate against one FactSet. Never persisted."""
    level: Optional[int] = None  # None for the level-independent quality report
    results: List[CheckResult] = Field(default_factory=list)

    @property
    def all_passed(self) -> bool:
        return not any(r.outcome == Outcome.FAIL for r in self.results)

    @property
    def failures(self) -> List[CheckResult]:
        return [r for r in self.results if r.outcome == Outcome.FAIL]

    @property
    def warnings(self) -> List[CheckResult]:
        return [r for r in self.results if r.outcome == Outcome.WARN]

    @property
    def failing_checks(self) -> List[CheckName]:
        return [r.check for r in self.failures]


# ──────────────────────────────────────────────
# Persisted State
# ──────────────────────────────────────────────

class ProjectState(BaseModel):
    """
    The single durable record per project.

    Serialized as {"currentLevel": int, "updatedAt": iso8601 | null}.
    Files written by older tooling used "level"; that key is still read.
    """
    model_config = ConfigDict(populate_by_name=True)

    current_level: int = Field(
        0,
        ge=0,
        le=MAX_LEVEL,
        validation_alias=AliasChoices("currentLevel", "current_level", "level"),
        serialization_alias="currentLevel",
    )
    updated_at: Optional[datetime] = Field(
        None,
        validation_alias=AliasChoices("updatedAt", "updated_at"),
        serialization_alias="updatedAt",
    )

    @field_validator("updated_at")
    @classmethod
    def assume_utc(cls, v: Optional[datetime]) -> Optional[datetime]:
        if v is not None and v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v


# ──────────────────────────────────────────────
# Controller Results
# ──────────────────────────────────────────────

class LevelStatus(BaseModel):
    current_level: int
    level_name: str
    next_level: Optional[int] = None
    next_level_name: Optional[str] = None
    updated_at: Optional[datetime] = None

    @property
    def is_terminal(self) -> bool:
        return self.next_level is None


class AdvanceResult(BaseModel):
    """Outcome of a checked advance. A refusal is a result, not an error."""
    from_level: int
    to_level: int
    report: GateReport
    reason: List[CheckName] = Field(
        default_factory=list,
        description="Failing checks that blocked the advance",
    )

    @property
    def advanced(self) -> bool:
        return self.to_level != self.from_level
