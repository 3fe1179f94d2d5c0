# src/clubrank/schemas/player_stats.py

"""Player statistics and rating history schemas."""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from .common import RatingInfo


class RivalryStats(BaseModel):
    opponent_id: int
    played: int = Field(0, ge=0)
    wins: int = Field(0, ge=0)
    losses: int = Field(0, ge=0)

    model_config = ConfigDict(from_attributes=True)


class PlayerStats(BaseModel):
    """Aggregate statistics for a player.

    Attributes:
        player_id: The player's ID
        player_name: The player's name
        rating_info: Current rating information
        games_played: All matches, resolved or not
        win_rate: Percentage of rated results won (0-100)
        recent_form: Last 10 rated matches, newest first (W, L or N)
        rivalries: Per-opponent records, most played first
    """

    player_id: int
    player_name: str
    rating_info: RatingInfo
    earned_tier: int
    tier_name: str
    total_rated_matches: int = Field(0, ge=0)
    peak_rating: float
    games_played: int = Field(0, ge=0)
    wins: int = Field(0, ge=0)
    losses: int = Field(0, ge=0)
    rated_wins: int = Field(0, ge=0)
    rated_losses: int = Field(0, ge=0)
    win_rate: float = Field(0.0, ge=0.0, le=100.0)
    current_streak: int = Field(0, ge=0)
    best_streak: int = Field(0, ge=0)
    recent_form: list[Literal["W", "L", "N"]] = Field(default_factory=list)
    rivalries: list[RivalryStats] = Field(default_factory=list)
    favorite_opponent_id: int | None = None
    rated_matches_last_30: int = Field(0, ge=0)
    last_match_date: str | None = None


class RatingTracePoint(BaseModel):
    """A player's rating at the end of a day on which they played."""

    date: str
    rating: float
    rd: float
    match_count: int = Field(..., ge=1)
    result: Literal["W", "L", "mixed"]

    model_config = ConfigDict(from_attributes=True)
