"""
Level registry: single source of truth for levels and checks.

Levels are enumerated from the static table in config; nothing here
creates or removes a level at runtime.
"""

from __future__ import annotations

from typing import Dict, Optional, Tuple

from evolution_framework.config import LEVEL_TABLE, MAX_LEVEL, MIN_LEVEL
from evolution_framework.errors import InvalidLevelError
from evolution_framework.schemas import CheckDefinition, CheckKind, CheckName, Level

CHECK_DEFINITIONS: Dict[CheckName, CheckDefinition] = {
    d.name: d
    for d in (
        CheckDefinition(name=CheckName.TESTS, description="Tests present"),
        CheckDefinition(name=CheckName.LINT, description="Lint configuration present"),
        CheckDefinition(name=CheckName.DOCS, description="Documentation present"),
        CheckDefinition(name=CheckName.AGENT_REVIEW, description="Agent review performed"),
        CheckDefinition(name=CheckName.INTEGRATION_TESTS, description="Integration tests present"),
        CheckDefinition(name=CheckName.E2E_TESTS, description="End-to-end tests present"),
        CheckDefinition(name=CheckName.SECURITY_AUDIT, description="Security audit performed"),
        CheckDefinition(
            name=CheckName.COVERAGE,
            description="Test coverage percentage",
            kind=CheckKind.AT_LEAST,
        ),
        CheckDefinition(
            name=CheckName.FILE_LENGTH,
            description="Longest source file, in lines",
            kind=CheckKind.AT_MOST,
        ),
        CheckDefinition(
            name=CheckName.COMPLEXITY,
            description="Highest per-function cyclomatic complexity",
            kind=CheckKind.AT_MOST,
        ),
        CheckDefinition(
            name=CheckName.RISKY_PATTERNS,
            description="No risky code patterns",
            kind=CheckKind.ADVISORY,
        ),
    )
}

LEVELS: Tuple[Level, ...] = tuple(
    Level(
        number=number,
        name=name,
        slug=slug,
        required_checks=tuple(CheckName(c) for c in checks),
        document=document,
    )
    for number, name, slug, checks, document in LEVEL_TABLE
)

if [lvl.number for lvl in LEVELS] != list(range(MIN_LEVEL, MAX_LEVEL + 1)):
    raise RuntimeError("LEVEL_TABLE must list every level from MIN_LEVEL to MAX_LEVEL in order.")


def validate_level(number: object, low: int = MIN_LEVEL, high: int = MAX_LEVEL) -> int:
    """Return `number` as a level index, or raise InvalidLevelError."""
    if isinstance(number, bool) or not isinstance(number, int):
        raise InvalidLevelError(number, low, high)
    if not low <= number <= high:
        raise InvalidLevelError(number, low, high)
    return number


def get_level(number: int) -> Level:
    return LEVELS[validate_level(number)]


def next_level(number: int) -> Optional[Level]:
    """The level after `number`, or None at the terminal level."""
    if validate_level(number) >= MAX_LEVEL:
        return None
    return LEVELS[number + 1]


def level_for_document(filename: str) -> Level:
    """Find the level whose defining artifact is `filename`."""
    for level in LEVELS:
        if level.document == filename:
            return level
    raise KeyError(
        f"No level is defined by '{filename}'. "
        f"Known documents: {[lvl.document for lvl in LEVELS if lvl.document]}"
    )
