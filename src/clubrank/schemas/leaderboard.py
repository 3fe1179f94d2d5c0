# src/clubrank/schemas/leaderboard.py

"""Leaderboard schemas."""

from pydantic import BaseModel, ConfigDict, Field

from .player import PlayerRead


class LeaderboardEntry(BaseModel):
    """Single entry in the leaderboard.

    Attributes:
        rank: Position in leaderboard (1-indexed)
        player: The player information, including rating and tier
        score: Ranking score
        conservative_rating: rating - 2 * rd
        opponent_factor: Strength of beaten opponents relative to 1500
        activity_bonus: Bonus for rated matches in the last 30 days
    """

    rank: int = Field(..., ge=1, description="Position in leaderboard (1-indexed)")
    player: PlayerRead
    score: float
    conservative_rating: float
    opponent_factor: float
    activity_bonus: float

    model_config = ConfigDict(from_attributes=True)


class RecomputeSummary(BaseModel):
    """Result of a full rating replay."""

    player_count: int
    match_count: int
    adjusted_match_count: int = Field(
        ..., description="Matches whose weight was cut by anti-manipulation rules"
    )
