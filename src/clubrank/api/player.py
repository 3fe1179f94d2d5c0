# src/clubrank/api/player.py

"""API endpoints for managing players."""

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from clubrank.db.models import Player
from clubrank.db.session import get_db
from clubrank.rating.tiers import tier_name
from clubrank.schemas import player as player_schema
from clubrank.schemas.common import RatingInfo
from clubrank.schemas.pagination import PaginatedResponse, PlayerSortField, SortOrder
from clubrank.schemas.player_stats import PlayerStats, RatingTracePoint, RivalryStats
from clubrank.services import rating_service

router = APIRouter(prefix="/players", tags=["Players"])


def _conflict(player_in: player_schema.PlayerBase | player_schema.PlayerUpdate) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_409_CONFLICT,
        detail=f"Player with name '{player_in.name}' or nickname "
        f"'{player_in.nickname}' already exists",
    )


@router.post(
    "/",
    response_model=player_schema.PlayerRead,
    status_code=status.HTTP_201_CREATED,
)
async def create_player(
    player_in: player_schema.PlayerCreate, db: AsyncSession = Depends(get_db)
) -> Player:
    """
    Register a player. Ratings start at 1500 / 350 / 0.06 in the Novice tier.

    Raises:
        409 Conflict: If the name or nickname is already taken.
    """
    player = Player(**player_in.model_dump())
    db.add(player)

    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise _conflict(player_in)

    await db.refresh(player)
    return player


@router.get("/", response_model=PaginatedResponse[player_schema.PlayerRead])
async def read_players(
    skip: int = Query(0, ge=0, description="Records to skip"),
    limit: int = Query(50, ge=1, le=100, description="Max records to return"),
    sort_by: PlayerSortField = Query(PlayerSortField.ID, description="Sort field"),
    sort_order: SortOrder = Query(SortOrder.ASC, description="Sort direction"),
    db: AsyncSession = Depends(get_db),
) -> PaginatedResponse[player_schema.PlayerRead]:
    """List the roster one page at a time, sortable by rating."""
    total = (await db.execute(select(func.count(Player.id)))).scalar_one()

    # Ties on rating or name fall back to id so pages never overlap
    query = (
        select(Player)
        .order_by(sort_order.apply(getattr(Player, sort_by.value)), Player.id)
        .offset(skip)
        .limit(limit)
    )
    items = (await db.execute(query)).scalars().all()

    return PaginatedResponse.from_page(items, total, skip, limit)


async def _get_player_or_404(db: AsyncSession, player_id: int) -> Player:
    player = await db.get(Player, player_id)
    if player is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Player with id {player_id} not found",
        )
    return player


@router.get("/{player_id}", response_model=player_schema.PlayerRead)
async def read_player(player_id: int, db: AsyncSession = Depends(get_db)) -> Player:
    return await _get_player_or_404(db, player_id)


@router.put("/{player_id}", response_model=player_schema.PlayerRead)
async def update_player(
    player_id: int,
    player_in: player_schema.PlayerUpdate,
    db: AsyncSession = Depends(get_db),
) -> Player:
    """
    Rename a player or change their nickname. Rating fields are read-only.

    A `null` name is ignored; a `null` nickname clears it.

    Raises:
        404 Not Found: If the player doesn't exist.
        409 Conflict: If the new name or nickname belongs to another player.
    """
    player = await _get_player_or_404(db, player_id)

    changes = player_in.model_dump(exclude_unset=True)
    if changes.get("name", "") is None:
        del changes["name"]
    for field_name, value in changes.items():
        setattr(player, field_name, value)

    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise _conflict(player_in)

    await db.refresh(player)
    return player


@router.get("/{player_id}/history", response_model=list[RatingTracePoint])
async def get_player_history(
    player_id: int, db: AsyncSession = Depends(get_db)
) -> list[RatingTracePoint]:
    """
    Day-by-day rating trace of a player, rebuilt from the full match history.

    One point per day on which the player had at least one resolved match,
    oldest first.

    Raises:
        404 Not Found: If the player doesn't exist.
    """
    trace = await rating_service.get_rating_history(db, player_id)
    return [RatingTracePoint.model_validate(point) for point in trace]


@router.get("/{player_id}/stats", response_model=PlayerStats)
async def get_player_stats(
    player_id: int,
    db: AsyncSession = Depends(get_db),
) -> PlayerStats:
    """
    Get aggregate statistics for a player.

    Returns the current rating and tier together with win/loss record,
    streaks, recent form and per-opponent rivalries.

    Raises:
        404 Not Found: If the player doesn't exist.
    """
    player, stats = await rating_service.get_player_stats(db, player_id)

    return PlayerStats(
        player_id=player.id,
        player_name=player.name,
        rating_info=RatingInfo(
            rating=player.rating, rd=player.rd, vol=player.volatility
        ),
        earned_tier=player.earned_tier,
        tier_name=tier_name(player.earned_tier),
        total_rated_matches=player.total_rated_matches,
        peak_rating=player.peak_rating,
        games_played=stats.games_played,
        wins=stats.wins,
        losses=stats.losses,
        rated_wins=stats.rated_wins,
        rated_losses=stats.rated_losses,
        win_rate=stats.win_rate,
        current_streak=stats.current_streak,
        best_streak=stats.best_streak,
        recent_form=stats.recent_form,  # type: ignore[arg-type]
        rivalries=[RivalryStats.model_validate(r) for r in stats.rivalries],
        favorite_opponent_id=stats.favorite_opponent,
        rated_matches_last_30=stats.rated_matches_last_30,
        last_match_date=stats.last_match_date,
    )
