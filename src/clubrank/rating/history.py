# src/clubrank/rating/history.py

"""Per-day rating trace of a single player, for rating-over-time charts."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from .glicko2_engine import Glicko2Engine
from .records import MatchRecord, PlayerId
from .replay import RatingReplay
from .weighting import WeightPolicy

WIN = "W"
LOSS = "L"
MIXED = "mixed"


@dataclass(frozen=True)
class TracePoint:
    date: str
    rating: float
    rd: float
    match_count: int
    result: str


def reconstruct_history(
    player_id: PlayerId,
    player_ids: Iterable[PlayerId],
    matches: Iterable[MatchRecord],
    policy: WeightPolicy | None = None,
    engine: Glicko2Engine | None = None,
) -> list[TracePoint]:
    """
    Replays the full history and records the player's rating after every day
    on which they had at least one resolved match.

    Casual and capped matches count toward ``match_count`` and ``result``
    even though they do not move the rating.
    """
    replay = RatingReplay(player_ids, matches, policy=policy, engine=engine)
    trace: list[TracePoint] = []

    for snapshot in replay.iter_periods():
        played = [item.match for item in snapshot.matches if item.match.involves(player_id)]
        if not played:
            continue

        wins = sum(1 for m in played if m.winner == player_id)
        if wins == len(played):
            result = WIN
        elif wins == 0:
            result = LOSS
        else:
            result = MIXED

        state = snapshot.ratings[player_id].state
        trace.append(TracePoint(snapshot.date, state.rating, state.rd, len(played), result))

    return trace
