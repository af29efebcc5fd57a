"""
Gate evaluator.

Checks a level's required checks against a FactSet and produces a
GateReport. No I/O. Same inputs always give the same report.

Outcome rules:
  - unknown fact            -> WARN ("indeterminate")
  - boolean fact True/False -> PASS/FAIL
  - advisory True/False     -> PASS/WARN, never FAIL
  - numeric fact            -> PASS when it clears its threshold (inclusive)
  - fact of the wrong kind  -> WARN (indeterminate, type mismatch)
"""

from __future__ import annotations

import logging
from typing import Iterable, List, Optional, Tuple

from evolution_framework.config import QUALITY_CHECKS
from evolution_framework.engine.levels import CHECK_DEFINITIONS
from evolution_framework.schemas import (
    BoolFact,
    CheckDefinition,
    CheckKind,
    CheckName,
    CheckResult,
    FactSet,
    GateReport,
    GateThresholds,
    Level,
    NumberFact,
    Outcome,
    UnknownFact,
)

logger = logging.getLogger(__name__)

INDETERMINATE = "indeterminate"

# Offending files listed in a detail before truncating
_MAX_LISTED_FILES = 5


def evaluate(
    level: Level,
    facts: FactSet,
    thresholds: Optional[GateThresholds] = None,
) -> GateReport:
    """
    Evaluate every check `level` requires, in declaration order.

    Args:
        level: The level whose gate is checked.
        facts: Complete snapshot from a ProjectInspector.
        thresholds: Numeric limits. Defaults to config values.

    Returns:
        GateReport; all_passed is True iff no check FAILed.
    """
    report = GateReport(
        level=level.number,
        results=_evaluate_checks(level.required_checks, facts, thresholds or GateThresholds()),
    )
    logger.info(
        "Gate L%d (%s): %d checks, %d failed, %d warnings",
        level.number,
        level.name,
        len(report.results),
        len(report.failures),
        len(report.warnings),
    )
    return report


def evaluate_quality(
    facts: FactSet,
    thresholds: Optional[GateThresholds] = None,
    checks: Optional[Iterable[CheckName]] = None,
) -> GateReport:
    """
    Level-independent quality report over the configured quality checks.

    Uses the same outcome rules as evaluate(); the report carries level=None.
    """
    selected = tuple(CheckName(c) for c in (checks if checks is not None else QUALITY_CHECKS))
    report = GateReport(
        level=None,
        results=_evaluate_checks(selected, facts, thresholds or GateThresholds()),
    )
    logger.info(
        "Quality gates: %d checks, %d failed, %d warnings",
        len(report.results),
        len(report.failures),
        len(report.warnings),
    )
    return report


def evaluate_check(
    check: CheckName,
    facts: FactSet,
    thresholds: GateThresholds,
) -> CheckResult:
    """Evaluate a single check against the facts."""
    definition = CHECK_DEFINITIONS[check]
    fact = facts.get(check)

    if isinstance(fact, UnknownFact):
        logger.info("Check '%s' is indeterminate.", check.value)
        return CheckResult(check=check, outcome=Outcome.WARN, detail=INDETERMINATE)

    if definition.kind == CheckKind.ADVISORY:
        if not isinstance(fact, BoolFact):
            return _mismatch(check, "boolean", fact.value)
        if fact.value:
            return CheckResult(check=check, outcome=Outcome.PASS, detail=definition.description)
        return CheckResult(
            check=check,
            outcome=Outcome.WARN,
            detail=f"{definition.description}: {_pattern_findings_detail(facts)}",
        )

    if definition.kind == CheckKind.BOOLEAN:
        if not isinstance(fact, BoolFact):
            return _mismatch(check, "boolean", fact.value)
        if fact.value:
            return CheckResult(check=check, outcome=Outcome.PASS, detail=definition.description)
        return CheckResult(
            check=check,
            outcome=Outcome.FAIL,
            detail=f"{definition.description}: required but not found",
        )

    if not isinstance(fact, NumberFact):
        return _mismatch(check, "numeric", fact.value)
    return _evaluate_numeric(definition, fact.value, facts, thresholds)


# ------------------------------------------------------------------
# Helpers
# ------------------------------------------------------------------

def _evaluate_checks(
    checks: Tuple[CheckName, ...],
    facts: FactSet,
    thresholds: GateThresholds,
) -> List[CheckResult]:
    return [evaluate_check(check, facts, thresholds) for check in checks]


def _evaluate_numeric(
    definition: CheckDefinition,
    value: float,
    facts: FactSet,
    thresholds: GateThresholds,
) -> CheckResult:
    check = definition.name
    limit = _threshold_for(check, thresholds)

    if definition.kind == CheckKind.AT_LEAST:
        passed = value >= limit
        bound = f"min: {limit:g}"
    else:
        passed = value <= limit
        bound = f"max: {limit:g}"

    detail = f"{definition.description}: {value:g} ({bound})"
    if not passed and check == CheckName.FILE_LENGTH:
        detail += _long_files_suffix(facts, limit)

    return CheckResult(
        check=check,
        outcome=Outcome.PASS if passed else Outcome.FAIL,
        detail=detail,
    )


def _threshold_for(check: CheckName, thresholds: GateThresholds) -> float:
    if check == CheckName.COVERAGE:
        return thresholds.min_coverage
    if check == CheckName.FILE_LENGTH:
        return thresholds.max_file_lines
    if check == CheckName.COMPLEXITY:
        return thresholds.max_complexity
    raise KeyError(f"No threshold configured for numeric check '{check.value}'.")


def _long_files_suffix(facts: FactSet, limit: float) -> str:
    """List files strictly over the line limit, longest first."""
    offenders = sorted(
        ((path, lines) for path, lines in facts.file_line_counts.items() if lines > limit),
        key=lambda item: (-item[1], item[0]),
    )
    if not offenders:
        return ""
    listed = ", ".join(f"{path} ({lines})" for path, lines in offenders[:_MAX_LISTED_FILES])
    more = len(offenders) - _MAX_LISTED_FILES
    if more > 0:
        listed += f", +{more} more"
    return f"; {len(offenders)} file(s) exceed limit: {listed}"


def _pattern_findings_detail(facts: FactSet) -> str:
    findings = [
        f"{path} ({', '.join(patterns)})"
        for path, patterns in sorted(facts.pattern_findings.items())
    ]
    if not findings:
        return "potential issues found"
    listed = ", ".join(findings[:_MAX_LISTED_FILES])
    more = len(findings) - _MAX_LISTED_FILES
    if more > 0:
        listed += f", +{more} more"
    return f"{len(findings)} file(s) with potential issues: {listed}"


def _mismatch(check: CheckName, expected: str, value: object) -> CheckResult:
    logger.warning(
        "Check '%s' expected a %s fact, got %r; treating as indeterminate.",
        check.value,
        expected,
        value,
    )
    return CheckResult(
        check=check,
        outcome=Outcome.WARN,
        detail=f"{INDETERMINATE}: expected a {expected} fact, got {value!r}",
    )
