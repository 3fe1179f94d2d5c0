# src/clubrank/services/rating_service.py

"""Bridges the rating engine and the database.

Every function that writes ratings expects the caller to hold
``rating_write_lock`` from the moment it reads the current ratings until the
transaction is committed. The full replay touches every player while the
incremental update touches two, so a single lock serialises both paths.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from clubrank.db import models
from clubrank.exceptions import PlayerNotFoundError
from clubrank.rating import (
    LeaderboardScore,
    MatchRecord,
    PlayerMeta,
    PlayerRating,
    PlayerStats,
    RatingReplay,
    RatingState,
    TracePoint,
    compute_player_stats,
    reconstruct_history,
    score_leaderboard,
    update_ratings_incremental,
)
from clubrank.rating.replay import utc_today

logger = logging.getLogger(__name__)

rating_write_lock = asyncio.Lock()


@dataclass
class RecomputeResult:
    player_count: int
    match_count: int
    adjusted_match_count: int


# ===============================================
# == Conversions
# ===============================================


def to_match_record(match: models.Match) -> MatchRecord:
    return MatchRecord(
        player_a=match.player_a_id,
        player_b=match.player_b_id,
        winner=match.winner_id,
        points=match.points,
        is_rated=match.is_rated,
        date=match.match_date,
        recorded_at=models.as_utc(match.recorded_at),
        match_id=match.id,
    )


def to_player_rating(player: models.Player) -> PlayerRating:
    return PlayerRating(
        state=RatingState(player.rating, player.rd, player.volatility),
        meta=PlayerMeta(
            total_rated_matches=player.total_rated_matches,
            earned_tier=player.earned_tier,
            peak_rating=player.peak_rating,
        ),
    )


def store_player_rating(player: models.Player, rating: PlayerRating) -> None:
    """Copy engine output onto the player row; the stored tier never drops."""
    player.rating = rating.rating
    player.rd = rating.rd
    player.volatility = rating.vol
    player.total_rated_matches = rating.total_rated_matches
    player.earned_tier = max(player.earned_tier, rating.earned_tier)
    player.peak_rating = rating.peak_rating


def day_bounds(day: str) -> tuple[datetime, datetime]:
    """UTC [start, end) of a YYYY-MM-DD day."""
    start = datetime.combine(date.fromisoformat(day), time.min, tzinfo=timezone.utc)
    return start, start + timedelta(days=1)


async def _load_roster(db: AsyncSession) -> list[models.Player]:
    result = await db.execute(select(models.Player).order_by(models.Player.id))
    return list(result.scalars().all())


async def _load_records(db: AsyncSession) -> list[MatchRecord]:
    return [to_match_record(m) for m in await models.Match.find_active(db)]


async def _get_player(db: AsyncSession, player_id: int) -> models.Player:
    player = await db.get(models.Player, player_id)
    if player is None:
        raise PlayerNotFoundError(player_id)
    return player


# ===============================================
# == Rating Writes (caller holds rating_write_lock)
# ===============================================


async def recompute_all_ratings(
    db: AsyncSession, today: date | None = None
) -> RecomputeResult:
    """
    Replays the whole match history and stores the result on every player.

    Changes are flushed, not committed; the caller owns the transaction.
    """
    players = await _load_roster(db)
    records = await _load_records(db)

    replay = RatingReplay([p.id for p in players], records)
    ratings = replay.run(today)

    for player in players:
        store_player_rating(player, ratings[player.id])
        db.add(player)
    await db.flush()

    result = RecomputeResult(
        player_count=len(players),
        match_count=len(records),
        adjusted_match_count=len(replay.adjustments),
    )
    logger.info(
        "Ratings recomputed",
        extra={
            "player_count": result.player_count,
            "match_count": result.match_count,
            "adjusted_match_count": result.adjusted_match_count,
        },
    )
    return result


async def apply_incremental_update(db: AsyncSession, match: models.Match) -> None:
    """
    Rates a newly recorded same-day match for its two players only.

    Earlier matches of the same day are handed to the engine so the daily cap
    and repeated-opponent rules still apply on this path.
    """
    player_a = await _get_player(db, match.player_a_id)
    player_b = await _get_player(db, match.player_b_id)

    record = to_match_record(match)
    start, end = day_bounds(record.date)
    same_day = [
        to_match_record(m)
        for m in await models.Match.find_recorded_between(db, start, end)
        if m.id != match.id
    ]

    updated = update_ratings_incremental(
        to_player_rating(player_a),
        to_player_rating(player_b),
        record,
        same_day_matches=same_day,
    )
    for player in (player_a, player_b):
        store_player_rating(player, updated[player.id])
        db.add(player)
    await db.flush()

    logger.debug(
        "Incremental rating update applied",
        extra={
            "match_id": match.id,
            "ratings": {p.id: round(p.rating, 2) for p in (player_a, player_b)},
        },
    )


# ===============================================
# == Rating Reads
# ===============================================


async def get_leaderboard(
    db: AsyncSession, today: date | None = None
) -> list[tuple[models.Player, LeaderboardScore]]:
    """Ranks players by leaderboard score using their stored ratings."""
    players = await _load_roster(db)
    by_id = {p.id: p for p in players}
    ratings = {p.id: to_player_rating(p) for p in players}

    scores = score_leaderboard(ratings, await _load_records(db), today=today)
    return [(by_id[entry.player_id], entry) for entry in scores]


async def get_rating_history(db: AsyncSession, player_id: int) -> list[TracePoint]:
    """Day-by-day rating trace of one player, from a full replay."""
    await _get_player(db, player_id)
    players = await _load_roster(db)
    return reconstruct_history(player_id, [p.id for p in players], await _load_records(db))


async def get_player_stats(
    db: AsyncSession, player_id: int, today: date | None = None
) -> tuple[models.Player, PlayerStats]:
    player = await _get_player(db, player_id)
    matches = await models.Match.find_for_player(db, player_id)
    stats = compute_player_stats(
        player_id, [to_match_record(m) for m in matches], today=today or utc_today()
    )
    return player, stats
