"""
Central configuration for the evolution framework.
All tunables live here, no magic numbers elsewhere.
"""

# ──────────────────────────────────────────────
# Levels
# ──────────────────────────────────────────────
MIN_LEVEL = 0
MAX_LEVEL = 5  # Terminal level, nothing to advance to beyond it

# (number, name, slug, required checks, defining document)
LEVEL_TABLE = [
    (0, "Basic Usage", "level-0-basic", [], None),
    (1, "CLAUDE.md", "level-1-claude-md", ["lint", "docs"], "CLAUDE.md"),
    (2, "skill.md", "level-2-skill", ["tests", "lint", "docs"], "skill.md"),
    (3, "agent.md", "level-3-agent", ["tests", "lint", "docs", "agent_review"], "agent.md"),
    (4, "Orchestration", "level-4-orchestration",
     ["tests", "lint", "docs", "agent_review", "integration_tests"], None),
    (5, "Ecosystem", "level-5-ecosystem",
     ["tests", "lint", "docs", "agent_review", "integration_tests", "e2e_tests", "security_audit"], None),
]

# ──────────────────────────────────────────────
# Progression
# ──────────────────────────────────────────────
ALLOW_SKIP = False  # Checked advance moves one level per call unless enabled

# ──────────────────────────────────────────────
# State file
# ──────────────────────────────────────────────
STATE_FILENAME = ".evolution"

# ──────────────────────────────────────────────
# Quality thresholds
# ──────────────────────────────────────────────
MIN_COVERAGE_PCT = 80.0  # Coverage at or above passes
MAX_FILE_LINES = 500  # Line counts at or below pass
MAX_COMPLEXITY = 10  # Per-function cyclomatic estimate at or below passes

# Checks run by the level-independent quality report
QUALITY_CHECKS = [
    "tests",
    "lint",
    "docs",
    "coverage",
    "file_length",
    "complexity",
    "risky_patterns",
]

# ──────────────────────────────────────────────
# Inspector
# ──────────────────────────────────────────────
MAX_SCANNED_FILES = 100  # Cap on source files measured per inspection
SOURCE_SUFFIXES = (".py", ".js", ".ts", ".jsx", ".tsx")
EXCLUDED_DIRS = frozenset({
    "node_modules",
    "coverage",
    "__pycache__",
    "venv",
    ".venv",
    "build",
    "dist",
})

# Substrings flagged by the risky_patterns check; findings warn, never fail
RISKY_PATTERNS = ("eval(", "innerHTML", "document.write")
MAX_PATTERN_SCAN_FILES = 20  # Cap on source files searched for risky patterns
