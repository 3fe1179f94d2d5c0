# src/clubrank/schemas/player.py

"""Pydantic schemas for the Player resource."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, computed_field

from clubrank.rating.tiers import tier_name


# ===============================================
# Base Schema: Defines shared attributes for creation
# ===============================================
class PlayerBase(BaseModel):
    """Shared properties for a player."""

    name: str = Field(..., min_length=1)
    nickname: str | None = None


class PlayerCreate(PlayerBase):
    """Properties to receive via API on create."""

    pass


class PlayerUpdate(BaseModel):
    """Properties to receive via API on update, all optional."""

    name: str | None = Field(default=None, min_length=1)
    nickname: str | None = None


# ===============================================
# Read Schema: Defines attributes for returning data
# ===============================================
class PlayerRead(PlayerBase):
    """Properties to return to the client, including the derived rating."""

    id: int
    created_at: datetime

    rating: float
    rd: float
    volatility: float
    total_rated_matches: int
    earned_tier: int
    peak_rating: float

    @computed_field  # type: ignore[prop-decorator]
    @property
    def tier_name(self) -> str:
        return tier_name(self.earned_tier)

    # Enable ORM mode for this schema
    model_config = ConfigDict(from_attributes=True)
