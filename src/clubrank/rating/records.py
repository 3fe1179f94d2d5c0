# src/clubrank/rating/records.py

"""Plain records exchanged between the rating engine and its callers."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from .glicko2_engine import DEFAULT_RATING, RatingState

PlayerId = int


@dataclass(frozen=True)
class MatchRecord:
    """A recorded match as the engine sees it.

    Attributes:
        player_a: First player
        player_b: Second player
        winner: Winning player, or None if the match was never resolved
        points: Match format, 10 or 20 points
        is_rated: False for casual matches
        date: Calendar day (YYYY-MM-DD) used to bucket rating periods
        recorded_at: Timestamp used only to order matches within a day
        match_id: Optional identifier for reporting
    """

    player_a: PlayerId
    player_b: PlayerId
    winner: PlayerId | None
    points: int
    is_rated: bool
    date: str
    recorded_at: datetime
    match_id: int | None = None

    @property
    def loser(self) -> PlayerId | None:
        if self.winner is None:
            return None
        return self.player_b if self.winner == self.player_a else self.player_a

    def opponent_of(self, player_id: PlayerId) -> PlayerId:
        return self.player_b if player_id == self.player_a else self.player_a

    def involves(self, player_id: PlayerId) -> bool:
        return player_id in (self.player_a, self.player_b)


@dataclass
class PlayerMeta:
    """Cumulative per-player metadata tracked alongside the rating."""

    total_rated_matches: int = 0
    earned_tier: int = 0
    peak_rating: float = DEFAULT_RATING


@dataclass
class PlayerRating:
    """A player's derived rating state together with its metadata."""

    state: RatingState = field(default_factory=RatingState)
    meta: PlayerMeta = field(default_factory=PlayerMeta)

    @property
    def rating(self) -> float:
        return self.state.rating

    @property
    def rd(self) -> float:
        return self.state.rd

    @property
    def vol(self) -> float:
        return self.state.vol

    @property
    def total_rated_matches(self) -> int:
        return self.meta.total_rated_matches

    @property
    def earned_tier(self) -> int:
        return self.meta.earned_tier

    @property
    def peak_rating(self) -> float:
        return self.meta.peak_rating

    def as_dict(self) -> dict:
        """Flatten into the field names used by the persistence layer."""
        return {
            "rating": self.state.rating,
            "rd": self.state.rd,
            "volatility": self.state.vol,
            "total_rated_matches": self.meta.total_rated_matches,
            "earned_tier": self.meta.earned_tier,
            "peak_rating": self.meta.peak_rating,
        }
