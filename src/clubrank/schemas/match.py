# src/clubrank/schemas/match.py

"""Pydantic schemas for the Match resource."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from .player import PlayerRead

# Only two formats are played: short (10 points) and full (20 points)
Points = Literal[10, 20]


class MatchBase(BaseModel):
    """Shared properties for a match."""

    player_a_id: int
    player_b_id: int
    winner_id: int | None = Field(
        default=None, description="Winning player, or None if unresolved"
    )
    points: Points = 20
    is_rated: bool = True


class MatchCreate(MatchBase):
    """
    Properties to receive via API on create.

    A match recorded on an earlier day than today is backdated and triggers a
    full rating replay instead of the incremental update.
    """

    recorded_at: datetime | None = Field(
        default=None,
        description="When the match was played (ISO format). Defaults to now.",
    )


class MatchUpdate(BaseModel):
    """Properties to receive via API on update, all optional."""

    player_a_id: int | None = None
    player_b_id: int | None = None
    winner_id: int | None = None
    points: Points | None = None
    is_rated: bool | None = None
    recorded_at: datetime | None = None


class MatchRead(MatchBase):
    """Properties to return to the client for a match."""

    id: int
    recorded_at: datetime
    match_date: str

    player_a: PlayerRead
    player_b: PlayerRead

    model_config = ConfigDict(from_attributes=True)
