# src/clubrank/rating/__init__.py

"""The player rating engine: weighted Glicko-2 with climb-only tiers."""

from .glicko2_engine import Glicko2Engine, RatingState
from .history import TracePoint, reconstruct_history
from .incremental import update_ratings_incremental
from .leaderboard import LeaderboardScore, score_leaderboard
from .records import MatchRecord, PlayerMeta, PlayerRating
from .replay import RatingReplay, replay_ratings
from .stats import PlayerStats, compute_player_stats
from .tiers import assign_tier, tier_name
from .weighting import WeightPolicy

__all__ = [
    "Glicko2Engine",
    "LeaderboardScore",
    "MatchRecord",
    "PlayerMeta",
    "PlayerRating",
    "PlayerStats",
    "RatingReplay",
    "RatingState",
    "TracePoint",
    "WeightPolicy",
    "assign_tier",
    "compute_player_stats",
    "reconstruct_history",
    "replay_ratings",
    "score_leaderboard",
    "tier_name",
    "update_ratings_incremental",
]
