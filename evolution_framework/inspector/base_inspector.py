"""
Abstract base class for project inspectors.

Every inspector must:
  - Return a complete FactSet snapshot in one call
  - Report what it cannot determine as unknown, never as False
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Mapping

from evolution_framework.schemas import FactSet


class BaseInspector(ABC):
    """Interface the controller uses to learn facts about a project."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Short identifier used in logs."""
        ...

    @abstractmethod
    def inspect(self) -> FactSet:
        """
        Gather every fact the inspector knows how to derive.

        Returns:
            FactSet keyed by check name.
        """
        ...

    def __repr__(self) -> str:
        return f"<Inspector: {self.name}>"


class StaticInspector(BaseInspector):
    """Returns a fixed FactSet. For tests and for facts gathered elsewhere."""

    def __init__(self, facts: FactSet | Mapping[str, Any] | None = None) -> None:
        if facts is None:
            facts = FactSet()
        elif not isinstance(facts, FactSet):
            facts = FactSet.from_mapping(facts)
        self._facts = facts
        self.calls = 0

    @property
    def name(self) -> str:
        return "static"

    def inspect(self) -> FactSet:
        self.calls += 1
        return self._facts
