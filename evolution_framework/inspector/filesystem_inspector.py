"""
Filesystem inspector -- derives project facts from what is on disk.

Presence of directories and config files stands in for the semantic
facts (tests exist, lint is configured, docs exist). Nothing is
executed: no test runner, no linter. Coverage is read from an existing
JSON summary only.

Facts that cannot be established from disk are left unknown.
"""

from __future__ import annotations

import ast
import json
import logging
import os
import tomllib
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from evolution_framework.config import (
    EXCLUDED_DIRS,
    MAX_PATTERN_SCAN_FILES,
    MAX_SCANNED_FILES,
    RISKY_PATTERNS,
    SOURCE_SUFFIXES,
)
from evolution_framework.inspector.base_inspector import BaseInspector
from evolution_framework.schemas import CheckName, FactSet

logger = logging.getLogger(__name__)

_TEST_DIRS = ("tests", "test", "__tests__")
_TEST_FILE_PATTERNS = ("test_*.py", "*_test.py", "*.test.js", "*.spec.js", "*.test.ts", "*.spec.ts")

_LINT_CONFIG_FILES = (
    ".eslintrc",
    ".eslintrc.js",
    ".eslintrc.json",
    ".eslintrc.yml",
    "eslint.config.js",
    ".prettierrc",
    ".flake8",
    "ruff.toml",
    ".ruff.toml",
    ".pylintrc",
)
_PYPROJECT_LINT_TABLES = ("ruff", "pylint", "flake8")

_DOC_PATHS = ("README.md", "docs", ".claude/CLAUDE.md")
_REVIEW_PATHS = ("agent.md", "reviews")
_INTEGRATION_PATHS = ("tests/integration", "integration_tests")
_E2E_PATHS = ("tests/e2e", "e2e", "cypress")
_E2E_PATTERNS = ("playwright.config.*",)
_SECURITY_AUDIT_PATHS = ("SECURITY.md", "security-audit.md")

# (relative path, key path to the percentage)
_COVERAGE_SOURCES: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
    ("coverage.json", ("totals", "percent_covered")),
    ("coverage/coverage-summary.json", ("total", "lines", "pct")),
)

_BRANCH_NODES = (
    ast.If,
    ast.For,
    ast.AsyncFor,
    ast.While,
    ast.ExceptHandler,
    ast.IfExp,
    ast.Assert,
    ast.match_case,
)
_SCOPE_NODES = (ast.FunctionDef, ast.AsyncFunctionDef, ast.Lambda, ast.ClassDef)


class FilesystemInspector(BaseInspector):
    """Inspects a project directory."""

    def __init__(self, root: Path | str, max_files: int = MAX_SCANNED_FILES) -> None:
        self.root = Path(root)
        self.max_files = max_files

    @property
    def name(self) -> str:
        return "filesystem"

    def inspect(self) -> FactSet:
        has_tests = self._has_tests()
        line_counts, sources = self._measure_sources()
        pattern_findings = _find_risky_patterns(sources)

        values: Dict[CheckName, Any] = {
            CheckName.TESTS: has_tests,
            CheckName.LINT: self._has_lint_config(),
            CheckName.DOCS: self._exists_any(_DOC_PATHS),
            CheckName.AGENT_REVIEW: self._exists_any(_REVIEW_PATHS) or None,
            CheckName.INTEGRATION_TESTS: self._test_suite_fact(has_tests, _INTEGRATION_PATHS),
            CheckName.E2E_TESTS: self._test_suite_fact(has_tests, _E2E_PATHS, _E2E_PATTERNS),
            CheckName.SECURITY_AUDIT: self._exists_any(_SECURITY_AUDIT_PATHS) or None,
            CheckName.COVERAGE: self._read_coverage(),
            CheckName.FILE_LENGTH: max(line_counts.values()) if line_counts else None,
            CheckName.COMPLEXITY: _max_complexity(sources),
            CheckName.RISKY_PATTERNS: not pattern_findings if sources else None,
        }
        facts = FactSet.from_mapping(
            values,
            file_line_counts=line_counts,
            pattern_findings=pattern_findings,
        )

        unknown = [c.value for c, v in facts.values.items() if v.kind == "unknown"]
        logger.info(
            "Inspected %s: %d source files measured, unknown facts: %s",
            self.root,
            len(line_counts),
            unknown or "none",
        )
        return facts

    # ------------------------------------------------------------------
    # Presence checks
    # ------------------------------------------------------------------

    def _exists_any(self, relative_paths: Tuple[str, ...]) -> bool:
        return any((self.root / p).exists() for p in relative_paths)

    def _glob_any(self, patterns: Tuple[str, ...]) -> bool:
        return any(next(self.root.glob(pattern), None) is not None for pattern in patterns)

    def _has_tests(self) -> bool:
        return self._exists_any(_TEST_DIRS) or self._glob_any(_TEST_FILE_PATTERNS)

    def _test_suite_fact(
        self,
        has_tests: bool,
        paths: Tuple[str, ...],
        patterns: Tuple[str, ...] = (),
    ) -> Optional[bool]:
        """True if the suite exists, False if other tests do, unknown otherwise."""
        if self._exists_any(paths) or self._glob_any(patterns):
            return True
        return False if has_tests else None

    def _has_lint_config(self) -> bool:
        if self._exists_any(_LINT_CONFIG_FILES):
            return True

        pyproject = self.root / "pyproject.toml"
        if pyproject.is_file():
            try:
                tool_tables = tomllib.loads(pyproject.read_text(encoding="utf-8")).get("tool", {})
            except (OSError, UnicodeDecodeError, tomllib.TOMLDecodeError) as exc:
                logger.warning("Could not parse %s: %s", pyproject, exc)
            else:
                if isinstance(tool_tables, dict) and any(
                    isinstance(tool_tables.get(table), dict) for table in _PYPROJECT_LINT_TABLES
                ):
                    return True

        setup_cfg = self.root / "setup.cfg"
        if setup_cfg.is_file():
            try:
                return "[flake8]" in setup_cfg.read_text(encoding="utf-8")
            except (OSError, UnicodeDecodeError) as exc:
                logger.warning("Could not read %s: %s", setup_cfg, exc)
        return False

    # ------------------------------------------------------------------
    # Numeric facts
    # ------------------------------------------------------------------

    def _read_coverage(self) -> Optional[float]:
        """Percentage from the first coverage summary found, else unknown."""
        for relative, keys in _COVERAGE_SOURCES:
            path = self.root / relative
            if not path.is_file():
                continue
            try:
                value: Any = json.loads(path.read_text(encoding="utf-8"))
                for key in keys:
                    value = value[key]
                return float(value)
            except (OSError, json.JSONDecodeError, KeyError, TypeError, ValueError) as exc:
                logger.warning("Unreadable coverage summary %s: %s", path, exc)
        return None

    def _measure_sources(self) -> Tuple[Dict[str, int], Dict[str, str]]:
        """
        Line counts and source text for up to max_files source files.

        Returns:
            (line counts keyed by relative path, source text keyed by relative path),
            both in traversal order.
        """
        line_counts: Dict[str, int] = {}
        sources: Dict[str, str] = {}

        for path in self._iter_source_files():
            relative = path.relative_to(self.root).as_posix()
            try:
                text = path.read_text(encoding="utf-8", errors="replace")
            except OSError as exc:
                logger.debug("Skipping unreadable file %s: %s", path, exc)
                continue
            line_counts[relative] = len(text.splitlines())
            sources[relative] = text

        return line_counts, sources

    def _iter_source_files(self) -> List[Path]:
        found: List[Path] = []
        for dirpath, dirnames, filenames in os.walk(self.root):
            dirnames[:] = sorted(
                d for d in dirnames if not d.startswith(".") and d not in EXCLUDED_DIRS
            )
            for filename in sorted(filenames):
                if filename.endswith(SOURCE_SUFFIXES):
                    found.append(Path(dirpath) / filename)
                    if len(found) >= self.max_files:
                        return found
        return found


# ------------------------------------------------------------------
# Risky patterns
# ------------------------------------------------------------------

def _find_risky_patterns(sources: Dict[str, str]) -> Dict[str, List[str]]:
    """Risky substrings per file, over the first MAX_PATTERN_SCAN_FILES sources."""
    findings: Dict[str, List[str]] = {}
    for relative, text in list(sources.items())[:MAX_PATTERN_SCAN_FILES]:
        found = [pattern for pattern in RISKY_PATTERNS if pattern in text]
        if found:
            findings[relative] = found
    if findings:
        logger.info("Risky patterns found in %d file(s): %s", len(findings), sorted(findings))
    return findings


# ------------------------------------------------------------------
# Complexity
# ------------------------------------------------------------------

def _max_complexity(sources: Dict[str, str]) -> Optional[int]:
    """Highest per-function cyclomatic estimate across the Python sources."""
    highest: Optional[int] = None
    for relative, text in sources.items():
        if not relative.endswith(".py"):
            continue
        try:
            tree = ast.parse(text, filename=relative)
        except SyntaxError as exc:
            logger.debug("Skipping unparseable %s: %s", relative, exc)
            continue
        for node in ast.walk(tree):
            if isinstance(node, (ast.FunctionDef, ast.AsyncFunctionDef)):
                score = function_complexity(node)
                if highest is None or score > highest:
                    highest = score
    return highest


def function_complexity(func: ast.AST) -> int:
    """
    1 + decision points in the function body.

    Nested functions and classes are scored on their own, not here.
    """
    score = 1
    stack = list(ast.iter_child_nodes(func))
    while stack:
        node = stack.pop()
        if isinstance(node, _SCOPE_NODES):
            continue
        if isinstance(node, _BRANCH_NODES):
            score += 1
        elif isinstance(node, ast.BoolOp):
            score += len(node.values) - 1
        elif isinstance(node, ast.comprehension):
            score += 1 + len(node.ifs)
        stack.extend(ast.iter_child_nodes(node))
    return score
