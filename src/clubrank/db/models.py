# src/clubrank/db/models.py

"""Database models for the ClubRank application."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, List

from sqlalchemy import ForeignKey, String, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import (
    Mapped,
    declarative_base,
    mapped_column,
    relationship,
)

from clubrank.rating.glicko2_engine import (
    DEFAULT_RATING,
    DEFAULT_RD,
    DEFAULT_VOLATILITY,
)

Base = declarative_base()


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """Attach UTC to naive values (SQLite drops tzinfo) and convert aware ones."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


# ===============================================
# Mixins for Common Columns
# ===============================================


class TimestampMixin:
    """Mixin providing created_at and updated_at timestamp columns."""

    created_at: Mapped[datetime] = mapped_column(default=utc_now, nullable=False)
    updated_at: Mapped[datetime | None] = mapped_column(
        default=None,
        onupdate=utc_now,
        nullable=True,
    )


class SoftDeleteMixin:
    """Mixin providing soft delete support via deleted_at column."""

    deleted_at: Mapped[datetime | None] = mapped_column(default=None, nullable=True)

    @property
    def is_deleted(self) -> bool:
        """Check if this record has been soft-deleted."""
        return self.deleted_at is not None


# ===============================================
# Players
# ===============================================


class Player(Base, TimestampMixin):
    """A club member together with their derived rating.

    The rating columns are a cache of the rating engine's output; a full
    replay can rebuild them from the match history at any time.
    """

    __tablename__ = "players"
    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String, unique=True, nullable=False)
    nickname: Mapped[str | None] = mapped_column(String, unique=True, nullable=True)

    rating: Mapped[float] = mapped_column(default=DEFAULT_RATING, nullable=False)
    rd: Mapped[float] = mapped_column(default=DEFAULT_RD, nullable=False)
    volatility: Mapped[float] = mapped_column(default=DEFAULT_VOLATILITY, nullable=False)
    total_rated_matches: Mapped[int] = mapped_column(default=0, nullable=False)
    # Climb-only: never lowered, even by a full replay
    earned_tier: Mapped[int] = mapped_column(default=0, nullable=False)
    peak_rating: Mapped[float] = mapped_column(default=DEFAULT_RATING, nullable=False)

    def __init__(self, name: str, **kw: Any):
        super().__init__(**kw)
        self.name = name


# ===============================================
# Matches
# ===============================================


class Match(Base, TimestampMixin, SoftDeleteMixin):
    """A single match between two players."""

    __tablename__ = "matches"
    id: Mapped[int] = mapped_column(primary_key=True)
    player_a_id: Mapped[int] = mapped_column(
        ForeignKey("players.id"), nullable=False, index=True
    )
    player_b_id: Mapped[int] = mapped_column(
        ForeignKey("players.id"), nullable=False, index=True
    )
    # None while the match is unresolved
    winner_id: Mapped[int | None] = mapped_column(
        ForeignKey("players.id"), nullable=True
    )

    # Match format: 10 or 20 points
    points: Mapped[int] = mapped_column(nullable=False, default=20)
    is_rated: Mapped[bool] = mapped_column(nullable=False, default=True)

    # Business timestamp: when the match was recorded. Its UTC calendar day
    # is the rating period the match belongs to.
    recorded_at: Mapped[datetime] = mapped_column(default=utc_now, index=True)

    player_a: Mapped["Player"] = relationship(foreign_keys=[player_a_id])
    player_b: Mapped["Player"] = relationship(foreign_keys=[player_b_id])
    winner: Mapped["Player | None"] = relationship(foreign_keys=[winner_id])

    @property
    def match_date(self) -> str:
        """The rating period (YYYY-MM-DD, UTC) this match belongs to."""
        return as_utc(self.recorded_at).date().isoformat()

    @classmethod
    async def find_active(cls, db: AsyncSession) -> List["Match"]:
        """All matches that have not been soft-deleted, oldest first."""
        query = (
            select(cls)
            .where(cls.deleted_at.is_(None))
            .order_by(cls.recorded_at, cls.id)
        )
        result = await db.execute(query)
        return list(result.scalars().all())

    @classmethod
    async def find_for_player(cls, db: AsyncSession, player_id: int) -> List["Match"]:
        """Active matches in which the player took part, oldest first."""
        query = (
            select(cls)
            .where(cls.deleted_at.is_(None))
            .where(or_(cls.player_a_id == player_id, cls.player_b_id == player_id))
            .order_by(cls.recorded_at, cls.id)
        )
        result = await db.execute(query)
        return list(result.scalars().all())

    @classmethod
    async def find_recorded_between(
        cls, db: AsyncSession, start: datetime, end: datetime
    ) -> List["Match"]:
        """Active matches recorded in [start, end), oldest first."""
        query = (
            select(cls)
            .where(cls.deleted_at.is_(None))
            .where(cls.recorded_at >= start, cls.recorded_at < end)
            .order_by(cls.recorded_at, cls.id)
        )
        result = await db.execute(query)
        return list(result.scalars().all())
