# src/clubrank/api/ratings.py

"""API endpoints for the leaderboard and rating maintenance."""

import logging

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from clubrank.db.session import get_db
from clubrank.schemas import player as player_schema
from clubrank.schemas.leaderboard import LeaderboardEntry, RecomputeSummary
from clubrank.services import rating_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/ratings", tags=["Ratings"])


@router.get("/leaderboard", response_model=list[LeaderboardEntry])
async def read_leaderboard(
    limit: int | None = Query(None, ge=1, le=500, description="Max entries to return"),
    db: AsyncSession = Depends(get_db),
) -> list[LeaderboardEntry]:
    """
    Ranked list of players with at least 5 rated matches.

    Score = 0.6 * c + 0.3 * c * opponent_factor + 0.1 * activity_bonus, where
    c = rating - 2 * rd. The opponent factor is the average rating of beaten
    opponents over 1500 (capped at 1.5), and the activity bonus is 5 per rated
    match in the last 30 days (capped at 100).
    """
    ranked = await rating_service.get_leaderboard(db)
    if limit is not None:
        ranked = ranked[:limit]

    return [
        LeaderboardEntry(
            rank=rank,
            player=player_schema.PlayerRead.model_validate(player),
            score=entry.score,
            conservative_rating=entry.conservative_rating,
            opponent_factor=entry.opponent_factor,
            activity_bonus=entry.activity_bonus,
        )
        for rank, (player, entry) in enumerate(ranked, start=1)
    ]


@router.post("/recompute", response_model=RecomputeSummary)
async def recompute_ratings(db: AsyncSession = Depends(get_db)) -> RecomputeSummary:
    """
    Replay every rating from the full match history.

    Run periodically (e.g. nightly) so that inactivity growth and ordering
    effects of the incremental path are folded back into stored ratings.
    """
    try:
        async with rating_service.rating_write_lock:
            result = await rating_service.recompute_all_ratings(db)
            await db.commit()
    except Exception:
        logger.error("Full rating replay failed", exc_info=True)
        await db.rollback()
        raise

    return RecomputeSummary(
        player_count=result.player_count,
        match_count=result.match_count,
        adjusted_match_count=result.adjusted_match_count,
    )
