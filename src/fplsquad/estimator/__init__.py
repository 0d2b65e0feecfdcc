"""Expected-points estimation for individual players."""

from .expected_points import (
    AWAY_MULTIPLIER,
    DIFFICULTY_MULTIPLIERS,
    HOME_MULTIPLIER,
    Breakdown,
    ScoredPlayer,
    blend_weights,
    estimate,
    score_players,
    upcoming_fixtures,
)

__all__ = [
    "AWAY_MULTIPLIER",
    "DIFFICULTY_MULTIPLIERS",
    "HOME_MULTIPLIER",
    "Breakdown",
    "ScoredPlayer",
    "blend_weights",
    "estimate",
    "score_players",
    "upcoming_fixtures",
]
