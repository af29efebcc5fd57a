"""
Exceptions raised by the evolution framework.

Gate failures are not exceptions: they are reported through GateReport.
"""

from __future__ import annotations


class EvolutionError(Exception):
    """Base class for every error the framework raises."""


class StorageError(EvolutionError):
    """The level state file could not be read, decoded, or written."""


class InvalidLevelError(EvolutionError, ValueError):
    """A level outside the defined range was requested."""

    def __init__(self, level: object, low: int, high: int) -> None:
        self.level = level
        self.low = low
        self.high = high
        super().__init__(f"Level must be between {low} and {high}, got {level!r}.")
