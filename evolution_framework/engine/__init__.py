from .controller import EvolutionController
from .gate_evaluator import evaluate, evaluate_quality
from .levels import CHECK_DEFINITIONS, LEVELS, get_level, next_level
from .state_store import LevelStateStore

__all__ = [
    "EvolutionController",
    "evaluate",
    "evaluate_quality",
    "CHECK_DEFINITIONS",
    "LEVELS",
    "get_level",
    "next_level",
    "LevelStateStore",
]
