"""Squad selection on top of the expected-points estimator."""

from .service import (
    OptimizedSquad,
    SquadOptimizationError,
    SquadSettings,
    formation_of,
    optimize,
    pick_lineup,
    split_lineup,
    validate_squad,
)

__all__ = [
    "OptimizedSquad",
    "SquadOptimizationError",
    "SquadSettings",
    "formation_of",
    "optimize",
    "pick_lineup",
    "split_lineup",
    "validate_squad",
]
