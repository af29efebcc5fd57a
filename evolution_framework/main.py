"""
Command-line entry point.

Commands:
  status                      Show the current level and progress
  level <0-5>                 Set the level directly (no gate check)
  check                       Evaluate the current level's gate
  quality                     Run the level-independent quality gates
  advance                     Advance one level if the gate passes
  evolve                      Inspect, evaluate, and promote in one pipeline
  gen-claude <name>           Generate CLAUDE.md (auto-advances 0 -> 1)
  gen-skill <name> <category> Generate skill.md (auto-advances 1 -> 2)
  gen-agent <name> <role>     Generate agent.md (auto-advances 2 -> 3)

Exit codes: 0 success, 1 a gate failed or state storage failed,
2 invalid level.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from pydantic import ValidationError

from evolution_framework.config import (
    ALLOW_SKIP,
    MAX_COMPLEXITY,
    MAX_FILE_LINES,
    MAX_LEVEL,
    MIN_COVERAGE_PCT,
)
from evolution_framework.engine.controller import EvolutionController
from evolution_framework.engine.gate_evaluator import evaluate_quality
from evolution_framework.engine.levels import LEVELS
from evolution_framework.engine.state_store import LevelStateStore
from evolution_framework.errors import InvalidLevelError, StorageError
from evolution_framework.generators.documents import (
    GeneratedDocument,
    generate_agent_md,
    generate_claude_md,
    generate_skill_md,
)
from evolution_framework.inspector.filesystem_inspector import FilesystemInspector
from evolution_framework.schemas import GateReport, GateThresholds, Outcome

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_INVALID_LEVEL = 2

_OUTCOME_ICONS = {
    Outcome.PASS: "✓",
    Outcome.FAIL: "✗",
    Outcome.WARN: "!",
}


# ──────────────────────────────────────────────
# Output
# ──────────────────────────────────────────────

def _print_status(controller: EvolutionController) -> None:
    status = controller.status()
    print("\n" + "=" * 40)
    print("EVOLUTION STATUS")
    print("=" * 40)
    print(f"Current Level: {status.current_level}")
    print(f"Level Name:    {status.level_name}")
    if status.updated_at is not None:
        print(f"Updated:       {status.updated_at.isoformat()}")

    print("\nProgress:")
    for level in LEVELS:
        if level.number == status.current_level:
            marker = "->"
        elif level.number < status.current_level:
            marker = "ok"
        else:
            marker = "  "
        print(f"  {marker} Level {level.number}: {level.name}")

    print("\nNext Milestone:")
    if status.is_terminal:
        print("  Maximum level reached.")
    else:
        print(f"  Level {status.next_level}: {status.next_level_name}")
    print("=" * 40 + "\n")


def _print_report(report: GateReport, title: str) -> None:
    print("\n" + "=" * 50)
    print(title)
    print("=" * 50)

    if not report.results:
        print("  (no checks required)")
    for result in report.results:
        icon = _OUTCOME_ICONS[result.outcome]
        print(f"  {icon} {result.check.value:<18s} {result.outcome.value:<5s} {result.detail}")

    print(f"\nPassed: {sum(1 for r in report.results if r.outcome == Outcome.PASS)}")
    print(f"Failed: {len(report.failures)}")
    print(f"Warnings: {len(report.warnings)}")

    if report.failures:
        print("\nUnmet checks:")
        for result in report.failures:
            print(f"  - {result.check.value}: {result.detail}")
        print("\nQuality gates FAILED")
    elif report.warnings:
        print("\nQuality gates passed with warnings")
    else:
        print("\nAll quality gates PASSED")
    print("=" * 50 + "\n")


def _print_generated(doc: GeneratedDocument) -> None:
    print(f"Generated {doc.path}")
    if doc.advanced:
        print(f"Level advanced to {doc.level}: {LEVELS[doc.level].name}")


# ──────────────────────────────────────────────
# Commands
# ──────────────────────────────────────────────

def _cmd_status(args, controller: EvolutionController) -> int:
    _print_status(controller)
    return EXIT_OK


def _cmd_level(args, controller: EvolutionController) -> int:
    try:
        controller.set_level(args.target)
    except InvalidLevelError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return EXIT_INVALID_LEVEL
    print(f"Level set to {args.target}: {LEVELS[args.target].name}")
    return EXIT_OK


def _cmd_check(args, controller: EvolutionController) -> int:
    report = controller.check()
    _print_report(report, f"QUALITY GATES - LEVEL {report.level}: {LEVELS[report.level].name}")
    return EXIT_OK if report.all_passed else EXIT_FAILED


def _cmd_quality(args, controller: EvolutionController) -> int:
    report = evaluate_quality(controller.inspector.inspect(), controller.thresholds)
    _print_report(report, "QUALITY GATES REPORT")
    return EXIT_OK if report.all_passed else EXIT_FAILED


def _cmd_advance(args, controller: EvolutionController) -> int:
    result = controller.advance_if_gates_pass()
    _print_report(result.report, f"QUALITY GATES - LEVEL {result.report.level}")
    if result.advanced:
        print(f"Advanced from level {result.from_level} to {result.to_level}: "
              f"{LEVELS[result.to_level].name}")
        return EXIT_OK
    if result.reason:
        print(f"Level {result.from_level} unchanged. Fix: "
              f"{', '.join(c.value for c in result.reason)}")
        return EXIT_FAILED
    print(f"Level {result.from_level} is the maximum level.")
    return EXIT_OK


def _cmd_evolve(args, controller: EvolutionController) -> int:
    from evolution_framework.engine.graph import build_evolution_graph, initial_state

    graph = build_evolution_graph(controller)
    final = graph.invoke(initial_state())
    report = GateReport.model_validate(final["report"])
    _print_report(report, f"EVOLVE - LEVEL {report.level}")
    if final["advanced"]:
        print(f"Promoted to level {final['level']}: {LEVELS[final['level']].name}")
        return EXIT_OK
    return EXIT_OK if report.all_passed else EXIT_FAILED


def _cmd_gen_claude(args, controller: EvolutionController) -> int:
    _print_generated(generate_claude_md(args.root, args.name, controller))
    return EXIT_OK


def _cmd_gen_skill(args, controller: EvolutionController) -> int:
    _print_generated(generate_skill_md(args.root, args.name, args.category, controller))
    return EXIT_OK


def _cmd_gen_agent(args, controller: EvolutionController) -> int:
    _print_generated(generate_agent_md(args.root, args.name, args.role, controller))
    return EXIT_OK


# ──────────────────────────────────────────────
# Wiring
# ──────────────────────────────────────────────

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="evolve",
        description="Evolution Framework: progressive quality gates",
    )
    parser.add_argument("--root", type=Path, default=Path("."),
                        help="Project directory (default: current directory)")
    parser.add_argument("--state-file", type=Path, default=None,
                        help="Level state file (default: <root>/.evolution)")
    parser.add_argument("--allow-skip", action="store_true", default=ALLOW_SKIP,
                        help="Let 'advance' climb several levels when gates pass")
    parser.add_argument("--min-coverage", type=float, default=MIN_COVERAGE_PCT,
                        help=f"Minimum coverage percentage (default: {MIN_COVERAGE_PCT:g})")
    parser.add_argument("--max-file-lines", type=int, default=MAX_FILE_LINES,
                        help=f"Maximum lines per source file (default: {MAX_FILE_LINES})")
    parser.add_argument("--max-complexity", type=int, default=MAX_COMPLEXITY,
                        help=f"Maximum per-function complexity (default: {MAX_COMPLEXITY})")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")

    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("status", help="Show current evolution status").set_defaults(func=_cmd_status)

    level = sub.add_parser("level", help=f"Set evolution level (0-{MAX_LEVEL})")
    level.add_argument("target", type=int)
    level.set_defaults(func=_cmd_level)

    sub.add_parser("check", help="Run the current level's quality gates").set_defaults(func=_cmd_check)
    sub.add_parser("quality", help="Run coverage, size, and complexity gates").set_defaults(func=_cmd_quality)
    sub.add_parser("advance", help="Advance one level if gates pass").set_defaults(func=_cmd_advance)
    sub.add_parser("evolve", help="Inspect, check, and promote").set_defaults(func=_cmd_evolve)

    gen_claude = sub.add_parser("gen-claude", help="Generate CLAUDE.md")
    gen_claude.add_argument("name", nargs="?", default="My Project")
    gen_claude.set_defaults(func=_cmd_gen_claude)

    gen_skill = sub.add_parser("gen-skill", help="Generate skill.md")
    gen_skill.add_argument("name", nargs="?", default="My Skill")
    gen_skill.add_argument("category", nargs="?", default="general")
    gen_skill.set_defaults(func=_cmd_gen_skill)

    gen_agent = sub.add_parser("gen-agent", help="Generate agent.md")
    gen_agent.add_argument("name", nargs="?", default="My Agent")
    gen_agent.add_argument("role", nargs="?", default="helper")
    gen_agent.set_defaults(func=_cmd_gen_agent)

    return parser


def build_controller(args: argparse.Namespace) -> EvolutionController:
    store = (
        LevelStateStore(state_path=args.state_file)
        if args.state_file is not None
        else LevelStateStore.for_project(args.root)
    )
    thresholds = GateThresholds(
        min_coverage=args.min_coverage,
        max_file_lines=args.max_file_lines,
        max_complexity=args.max_complexity,
    )
    return EvolutionController(
        store=store,
        inspector=FilesystemInspector(args.root),
        thresholds=thresholds,
        allow_skip=args.allow_skip,
    )


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )

    try:
        controller = build_controller(args)
    except ValidationError as exc:
        parser.error(f"invalid threshold: {exc.errors()[0]['msg']}")

    try:
        return args.func(args, controller)
    except StorageError as exc:
        logger.error("%s", exc)
        print(f"Error: {exc}", file=sys.stderr)
        return EXIT_FAILED


if __name__ == "__main__":
    sys.exit(main())
