# src/clubrank/rating/stats.py

"""Aggregate match statistics for a single player."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import date, timedelta

from .records import MatchRecord, PlayerId
from .replay import utc_today
from .weighting import recording_order

RECENT_FORM_LENGTH = 10
ACTIVITY_DAYS = 30


@dataclass
class Rivalry:
    opponent_id: PlayerId
    played: int = 0
    wins: int = 0
    losses: int = 0


@dataclass
class PlayerStats:
    """Win/loss record, streaks and rivalries derived from match history.

    Attributes:
        games_played: All matches involving the player, resolved or not
        win_rate: Percentage of rated results won (0-100)
        recent_form: Last rated matches, newest first: W, L or N (no result)
        rivalries: Per-opponent records, most played first
    """

    player_id: PlayerId
    games_played: int = 0
    wins: int = 0
    losses: int = 0
    rated_wins: int = 0
    rated_losses: int = 0
    win_rate: float = 0.0
    current_streak: int = 0
    best_streak: int = 0
    recent_form: list[str] = field(default_factory=list)
    rivalries: list[Rivalry] = field(default_factory=list)
    favorite_opponent: PlayerId | None = None
    rated_matches_last_30: int = 0
    last_match_date: str | None = None


def compute_player_stats(
    player_id: PlayerId,
    matches: Iterable[MatchRecord],
    today: date | None = None,
) -> PlayerStats:
    today = today or utc_today()
    played = recording_order(m for m in matches if m.involves(player_id))
    stats = PlayerStats(player_id=player_id, games_played=len(played))
    if not played:
        return stats

    rivalries: dict[PlayerId, Rivalry] = {}
    streak = 0
    for m in played:
        rivalry = rivalries.setdefault(m.opponent_of(player_id), Rivalry(m.opponent_of(player_id)))
        rivalry.played += 1
        if m.winner is None:
            continue

        if m.winner == player_id:
            stats.wins += 1
            rivalry.wins += 1
            if m.is_rated:
                stats.rated_wins += 1
            streak += 1
            stats.best_streak = max(stats.best_streak, streak)
        else:
            stats.losses += 1
            rivalry.losses += 1
            if m.is_rated:
                stats.rated_losses += 1
            streak = 0

    rated_results = stats.rated_wins + stats.rated_losses
    if rated_results:
        stats.win_rate = stats.rated_wins / rated_results * 100

    newest_first = played[::-1]
    for m in newest_first:
        if m.winner is None:
            continue
        if m.winner != player_id:
            break
        stats.current_streak += 1

    for m in [m for m in newest_first if m.is_rated][:RECENT_FORM_LENGTH]:
        if m.winner is None:
            stats.recent_form.append("N")
        else:
            stats.recent_form.append("W" if m.winner == player_id else "L")

    # Stable sort keeps first-met order among equally frequent opponents
    stats.rivalries = sorted(rivalries.values(), key=lambda r: r.played, reverse=True)
    stats.favorite_opponent = stats.rivalries[0].opponent_id

    cutoff = (today - timedelta(days=ACTIVITY_DAYS)).isoformat()
    stats.rated_matches_last_30 = sum(
        1 for m in played if m.is_rated and m.winner is not None and m.date >= cutoff
    )
    stats.last_match_date = max(m.date for m in played)
    return stats
