# src/clubrank/schemas/__init__.py

"""Pydantic schemas for API validation and serialization."""

from .common import RatingInfo
from .leaderboard import LeaderboardEntry, RecomputeSummary
from .match import MatchBase, MatchCreate, MatchRead, MatchUpdate
from .pagination import PaginatedResponse
from .player import PlayerBase, PlayerCreate, PlayerRead, PlayerUpdate
from .player_stats import PlayerStats, RatingTracePoint, RivalryStats

__all__ = [
    # Common
    "RatingInfo",
    "PaginatedResponse",
    # Leaderboard
    "LeaderboardEntry",
    "RecomputeSummary",
    # Match
    "MatchBase",
    "MatchCreate",
    "MatchRead",
    "MatchUpdate",
    # Player
    "PlayerBase",
    "PlayerCreate",
    "PlayerRead",
    "PlayerUpdate",
    # Stats
    "PlayerStats",
    "RatingTracePoint",
    "RivalryStats",
]
