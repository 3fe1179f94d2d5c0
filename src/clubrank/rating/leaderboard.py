# src/clubrank/rating/leaderboard.py

"""
Leaderboard ranking score.

score = 0.60 * conservative
      + 0.30 * conservative * opponent_factor
      + 0.10 * activity_bonus

where conservative = rating - 2 * rd, opponent_factor rewards beating strong
opponents and activity_bonus rewards recent rated play.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from datetime import date, timedelta

from .glicko2_engine import DEFAULT_RATING
from .records import MatchRecord, PlayerId, PlayerRating
from .replay import utc_today

MIN_RATED_MATCHES = 5

RECENT_WIN_DAYS = 90
ACTIVITY_DAYS = 30

STALE_WINS_PENALTY = 0.95
NO_WINS_OPPONENT_RATING = DEFAULT_RATING * 0.9
MAX_OPPONENT_FACTOR = 1.5

ACTIVITY_POINTS_PER_MATCH = 5
MAX_ACTIVITY_BONUS = 100

RATING_SHARE = 0.60
OPPONENT_SHARE = 0.30
ACTIVITY_SHARE = 0.10


@dataclass(frozen=True)
class LeaderboardScore:
    player_id: PlayerId
    score: float
    conservative_rating: float
    opponent_factor: float
    activity_bonus: float


def _since(today: date, days: int) -> str:
    return (today - timedelta(days=days)).isoformat()


def average_beaten_rating(
    player_id: PlayerId,
    rated_matches: list[MatchRecord],
    ratings: Mapping[PlayerId, PlayerRating],
    today: date,
) -> float:
    """Average current rating of opponents beaten, recent wins preferred."""
    beaten = [
        (m.date, ratings[m.opponent_of(player_id)].rating)
        for m in rated_matches
        if m.winner == player_id and m.opponent_of(player_id) in ratings
    ]
    if not beaten:
        return NO_WINS_OPPONENT_RATING

    cutoff = _since(today, RECENT_WIN_DAYS)
    recent = [rating for day, rating in beaten if day >= cutoff]
    if recent:
        return sum(recent) / len(recent)

    all_time = [rating for _, rating in beaten]
    return sum(all_time) / len(all_time) * STALE_WINS_PENALTY


def score_leaderboard(
    ratings: Mapping[PlayerId, PlayerRating],
    matches: Iterable[MatchRecord],
    today: date | None = None,
    min_matches: int = MIN_RATED_MATCHES,
) -> list[LeaderboardScore]:
    """
    Scores and ranks every eligible player, best first.

    Only players with at least ``min_matches`` rated matches are listed.
    Equal scores keep the order of ``ratings``.
    """
    today = today or utc_today()
    activity_cutoff = _since(today, ACTIVITY_DAYS)

    by_player: dict[PlayerId, list[MatchRecord]] = {player_id: [] for player_id in ratings}
    for m in matches:
        if m.winner is None or not m.is_rated:
            continue
        for player_id in (m.player_a, m.player_b):
            if player_id in by_player:
                by_player[player_id].append(m)

    entries = []
    for player_id, record in ratings.items():
        if record.total_rated_matches < min_matches:
            continue

        conservative = record.rating - 2 * record.rd
        average = average_beaten_rating(player_id, by_player[player_id], ratings, today)
        opponent_factor = min(average / DEFAULT_RATING, MAX_OPPONENT_FACTOR)

        recent_count = sum(1 for m in by_player[player_id] if m.date >= activity_cutoff)
        activity_bonus = min(recent_count * ACTIVITY_POINTS_PER_MATCH, MAX_ACTIVITY_BONUS)

        score = (
            RATING_SHARE * conservative
            + OPPONENT_SHARE * conservative * opponent_factor
            + ACTIVITY_SHARE * activity_bonus
        )
        entries.append(
            LeaderboardScore(player_id, score, conservative, opponent_factor, activity_bonus)
        )

    # sorted() is stable, so ties keep input order
    return sorted(entries, key=lambda entry: entry.score, reverse=True)
