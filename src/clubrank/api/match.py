# src/clubrank/api/match.py

"""API endpoints for managing matches."""

from datetime import datetime

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from clubrank.db.models import Match
from clubrank.db.session import get_db
from clubrank.schemas import match as match_schema
from clubrank.schemas.pagination import MatchSortField, PaginatedResponse, SortOrder
from clubrank.services import match_service

router = APIRouter(prefix="/matches", tags=["Matches"])


@router.get("/", response_model=PaginatedResponse[match_schema.MatchRead])
async def read_matches(
    skip: int = Query(0, ge=0, description="Records to skip"),
    limit: int = Query(50, ge=1, le=100, description="Max records to return"),
    sort_by: MatchSortField = Query(MatchSortField.RECORDED_AT, description="Sort field"),
    sort_order: SortOrder = Query(SortOrder.DESC, description="Sort direction"),
    player_id: int | None = Query(None, description="Filter by player"),
    is_rated: bool | None = Query(None, description="Filter rated or casual"),
    recorded_after: datetime | None = Query(None, description="After this date"),
    recorded_before: datetime | None = Query(None, description="Before this date"),
    db: AsyncSession = Depends(get_db),
) -> PaginatedResponse[match_schema.MatchRead]:
    """
    List active matches, newest first unless asked otherwise.

    Filters combine with AND:

    - **player_id**: Filter by player participation
    - **is_rated**: Only rated (true) or casual (false) matches
    - **recorded_after**: Filter matches recorded at or after this datetime
    - **recorded_before**: Filter matches recorded at or before this datetime
    """
    base_query = select(Match).where(Match.deleted_at.is_(None))

    if player_id is not None:
        base_query = base_query.where(
            or_(Match.player_a_id == player_id, Match.player_b_id == player_id)
        )

    if is_rated is not None:
        base_query = base_query.where(Match.is_rated == is_rated)

    if recorded_after is not None:
        base_query = base_query.where(Match.recorded_at >= recorded_after)

    if recorded_before is not None:
        base_query = base_query.where(Match.recorded_at <= recorded_before)

    total = (
        await db.execute(select(func.count()).select_from(base_query.subquery()))
    ).scalar_one()

    # id breaks ties between matches recorded at the same instant
    query = (
        base_query.order_by(
            sort_order.apply(getattr(Match, sort_by.value)),
            sort_order.apply(Match.id),
        )
        .offset(skip)
        .limit(limit)
        .options(selectinload(Match.player_a), selectinload(Match.player_b))
    )
    items = (await db.execute(query)).scalars().all()

    return PaginatedResponse.from_page(items, total, skip, limit)


@router.post(
    "/", response_model=match_schema.MatchRead, status_code=status.HTTP_201_CREATED
)
async def create_match(
    match_in: match_schema.MatchCreate, db: AsyncSession = Depends(get_db)
) -> Match:
    """
    Record a new match and update ratings.

    A match recorded today updates its two players incrementally; a
    backdated match replays every rating from scratch.

    Raises:
        404: If a player_id doesn't exist
        422: If both sides are the same player or the winner is not one of them
        500: If rating calculation fails
    """
    return await match_service.process_new_match(db, match_in)


@router.get("/{match_id}", response_model=match_schema.MatchRead)
async def read_match(match_id: int, db: AsyncSession = Depends(get_db)) -> Match:
    """Return one match with both players. Deleted matches are not found."""
    return await match_service.get_match(db, match_id)


@router.put("/{match_id}", response_model=match_schema.MatchRead)
async def update_match(
    match_id: int,
    match_in: match_schema.MatchUpdate,
    db: AsyncSession = Depends(get_db),
) -> Match:
    """
    Edit a match. Every rating is replayed from the corrected history.

    Raises:
        404: If the match or a player doesn't exist
        422: If the edited match is invalid
    """
    return await match_service.update_match(db, match_id, match_in)


@router.delete("/{match_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_match(match_id: int, db: AsyncSession = Depends(get_db)) -> None:
    """
    Delete a match. Every rating is replayed without it.
    """
    await match_service.delete_match(db, match_id)
    return None
