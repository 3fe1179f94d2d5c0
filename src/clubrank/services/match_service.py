# src/clubrank/services/match_service.py

"""Business logic for match-related operations."""

from __future__ import annotations

import logging
from datetime import date

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from clubrank.db import models
from clubrank.exceptions import (
    InvalidWinnerError,
    MatchNotFoundError,
    PlayerNotFoundError,
    SamePlayerError,
)
from clubrank.rating.replay import utc_today
from clubrank.schemas import match as match_schema
from clubrank.services import rating_service

logger = logging.getLogger(__name__)


async def _validate_players(
    db: AsyncSession,
    player_a_id: int,
    player_b_id: int,
    winner_id: int | None,
) -> None:
    """
    Validates the two sides and the winner of a match.

    Raises:
        SamePlayerError: If both sides are the same player
        InvalidWinnerError: If the winner is not one of the two players
        PlayerNotFoundError: If either player does not exist
    """
    if player_a_id == player_b_id:
        raise SamePlayerError(player_a_id)

    if winner_id is not None and winner_id not in (player_a_id, player_b_id):
        raise InvalidWinnerError(winner_id, [player_a_id, player_b_id])

    query = select(models.Player.id).where(
        models.Player.id.in_([player_a_id, player_b_id])
    )
    existing_ids = set((await db.execute(query)).scalars().all())
    for player_id in (player_a_id, player_b_id):
        if player_id not in existing_ids:
            raise PlayerNotFoundError(player_id)


async def get_match(db: AsyncSession, match_id: int) -> models.Match:
    """Fetch an active match with both players eager loaded."""
    result = await db.execute(
        select(models.Match)
        .where(models.Match.id == match_id)
        .where(models.Match.deleted_at.is_(None))
        .options(
            selectinload(models.Match.player_a), selectinload(models.Match.player_b)
        )
        .execution_options(populate_existing=True)
    )
    match = result.scalar_one_or_none()
    if match is None:
        raise MatchNotFoundError(match_id)
    return match


async def _takes_fast_path(db: AsyncSession, match: models.Match, today: date) -> bool:
    """A match dated today that was recorded after every other match of the day."""
    if match.match_date != today.isoformat():
        return False
    start, end = rating_service.day_bounds(match.match_date)
    recorded_at = models.as_utc(match.recorded_at)
    same_day = await models.Match.find_recorded_between(db, start, end)
    return all(
        models.as_utc(other.recorded_at) <= recorded_at
        for other in same_day
        if other.id != match.id
    )


async def process_new_match(
    db: AsyncSession,
    match_in: match_schema.MatchCreate,
    today: date | None = None,
) -> models.Match:
    """
    Records a new match and updates ratings.

    A match recorded today, after every other match of the day, goes
    through the incremental update of its two players. Any other match
    (backdated, future-dated, or slotted before a match already recorded
    today) changes history, so every player is replayed from scratch.

    All operations are performed within a single transaction and under the
    rating write lock. If any step fails, the entire transaction is rolled
    back.

    Raises:
        SamePlayerError: If both sides are the same player
        InvalidWinnerError: If the winner is not one of the two players
        PlayerNotFoundError: If a player_id doesn't exist
    """
    today = today or utc_today()
    logger.info(
        "Processing new match",
        extra={
            "player_a_id": match_in.player_a_id,
            "player_b_id": match_in.player_b_id,
            "is_rated": match_in.is_rated,
        },
    )

    try:
        await _validate_players(
            db, match_in.player_a_id, match_in.player_b_id, match_in.winner_id
        )

        match_data = match_in.model_dump(exclude_none=True)
        match_data["recorded_at"] = models.as_utc(
            match_data.get("recorded_at") or models.utc_now()
        )
        new_match = models.Match(**match_data)

        async with rating_service.rating_write_lock:
            db.add(new_match)
            await db.flush()

            if await _takes_fast_path(db, new_match, today):
                logger.info("Applying incremental rating update", extra={"match_id": new_match.id})
                await rating_service.apply_incremental_update(db, new_match)
            else:
                logger.info(
                    "Match changes earlier history, replaying all ratings",
                    extra={"match_id": new_match.id, "match_date": new_match.match_date},
                )
                await rating_service.recompute_all_ratings(db, today=today)

            await db.commit()

        logger.info("Match processed successfully", extra={"match_id": new_match.id})
        return await get_match(db, new_match.id)

    except Exception as e:
        logger.error(
            "Failed to process match",
            extra={"player_a_id": match_in.player_a_id, "error": str(e)},
            exc_info=True,
        )
        await db.rollback()
        raise


async def update_match(
    db: AsyncSession,
    match_id: int,
    match_in: match_schema.MatchUpdate,
    today: date | None = None,
) -> models.Match:
    """
    Edits an existing match and replays all ratings.

    Raises:
        MatchNotFoundError: If the match doesn't exist or was deleted
        SamePlayerError: If both sides end up as the same player
        InvalidWinnerError: If the winner is not one of the two players
        PlayerNotFoundError: If a player_id doesn't exist
    """
    try:
        match = await get_match(db, match_id)
        update_data = match_in.model_dump(exclude_unset=True)
        if update_data.get("recorded_at") is not None:
            update_data["recorded_at"] = models.as_utc(update_data["recorded_at"])

        await _validate_players(
            db,
            update_data.get("player_a_id") or match.player_a_id,
            update_data.get("player_b_id") or match.player_b_id,
            update_data["winner_id"] if "winner_id" in update_data else match.winner_id,
        )

        async with rating_service.rating_write_lock:
            for key, value in update_data.items():
                if value is None and key != "winner_id":
                    continue
                setattr(match, key, value)
            db.add(match)
            await db.flush()

            await rating_service.recompute_all_ratings(db, today=today)
            await db.commit()

        logger.info(
            "Match updated",
            extra={"match_id": match_id, "fields": sorted(update_data)},
        )
        return await get_match(db, match_id)

    except Exception as e:
        logger.error(
            "Failed to update match",
            extra={"match_id": match_id, "error": str(e)},
            exc_info=True,
        )
        await db.rollback()
        raise


async def delete_match(
    db: AsyncSession, match_id: int, today: date | None = None
) -> None:
    """
    Soft-deletes a match and replays all ratings without it.

    Raises:
        MatchNotFoundError: If the match doesn't exist or was already deleted
    """
    try:
        match = await get_match(db, match_id)

        async with rating_service.rating_write_lock:
            match.deleted_at = models.utc_now()
            db.add(match)
            await db.flush()

            await rating_service.recompute_all_ratings(db, today=today)
            await db.commit()

        logger.info("Match deleted", extra={"match_id": match_id})

    except Exception as e:
        logger.error(
            "Failed to delete match",
            extra={"match_id": match_id, "error": str(e)},
            exc_info=True,
        )
        await db.rollback()
        raise
