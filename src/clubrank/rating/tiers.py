# src/clubrank/rating/tiers.py

"""Climb-only tiers: once earned, a tier is never taken away."""

from typing import NamedTuple


class Tier(NamedTuple):
    tier_id: int
    name: str
    min_rating: float
    min_total_matches: int


# Highest first; a tier needs both thresholds at the same moment.
TIER_THRESHOLDS = (
    Tier(5, "Master", 1900, 60),
    Tier(4, "Elite", 1750, 40),
    Tier(3, "Advanced", 1600, 25),
    Tier(2, "Intermediate", 1500, 15),
    Tier(1, "Beginner", 1400, 10),
    Tier(0, "Novice", 0, 0),
)

NOVICE = 0


def assign_tier(rating: float, total_matches: int, previous_tier: int = NOVICE) -> int:
    """Return the highest tier reached, never lower than ``previous_tier``."""
    computed = NOVICE
    for tier in TIER_THRESHOLDS:
        if rating >= tier.min_rating and total_matches >= tier.min_total_matches:
            computed = tier.tier_id
            break
    return max(previous_tier, computed)


def tier_name(tier_id: int) -> str:
    for tier in TIER_THRESHOLDS:
        if tier.tier_id == tier_id:
            return tier.name
    return TIER_THRESHOLDS[-1].name
