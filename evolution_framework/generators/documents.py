"""
Document generators -- write a level's defining artifact.

Each generator renders its template into the project root, then asks
the controller to auto-advance to the document's level. The advance
only happens when the project is exactly one level below it; no gate
is evaluated.
"""

from __future__ import annotations

import logging
from datetime import date
from pathlib import Path

from pydantic import BaseModel

from evolution_framework.engine.controller import EvolutionController
from evolution_framework.engine.levels import level_for_document
from evolution_framework.errors import StorageError
from evolution_framework.generators.templates import (
    AGENT_MD_TEMPLATE,
    CLAUDE_MD_TEMPLATE,
    SKILL_MD_TEMPLATE,
)

logger = logging.getLogger(__name__)


class GeneratedDocument(BaseModel):
    path: Path
    level: int
    advanced: bool


def generate_claude_md(
    root: Path,
    project_name: str,
    controller: EvolutionController,
) -> GeneratedDocument:
    """Write CLAUDE.md for `project_name` (defines level 1)."""
    content = CLAUDE_MD_TEMPLATE.format(name=project_name, date=_today())
    return _write_document(root, "CLAUDE.md", content, project_name, controller)


def generate_skill_md(
    root: Path,
    skill_name: str,
    category: str,
    controller: EvolutionController,
) -> GeneratedDocument:
    """Write skill.md for `skill_name` (defines level 2)."""
    content = SKILL_MD_TEMPLATE.format(name=skill_name, category=category, date=_today())
    return _write_document(root, "skill.md", content, skill_name, controller)


def generate_agent_md(
    root: Path,
    agent_name: str,
    role: str,
    controller: EvolutionController,
) -> GeneratedDocument:
    """Write agent.md for `agent_name` (defines level 3)."""
    content = AGENT_MD_TEMPLATE.format(name=agent_name, role=role, date=_today())
    return _write_document(root, "agent.md", content, agent_name, controller)


# ------------------------------------------------------------------
# Helpers
# ------------------------------------------------------------------

def _today() -> str:
    return date.today().isoformat()


def _write_document(
    root: Path,
    filename: str,
    content: str,
    subject: str,
    controller: EvolutionController,
) -> GeneratedDocument:
    level = level_for_document(filename)
    path = Path(root) / filename

    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
    except OSError as exc:
        raise StorageError(f"Cannot write {path}: {exc}") from exc

    logger.info("Generated %s for '%s' at %s", filename, subject, path)
    advanced = controller.auto_advance(level.number)
    return GeneratedDocument(path=path, level=level.number, advanced=advanced)
