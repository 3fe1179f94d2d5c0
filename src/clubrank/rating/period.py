# src/clubrank/rating/period.py

"""Applies one rating period (one calendar day) of weighted matches."""

from __future__ import annotations

from collections.abc import Mapping
from typing import NamedTuple

from .glicko2_engine import Glicko2Engine, InternalRating, RatingState
from .records import PlayerId


class PeriodMatch(NamedTuple):
    """One weighted, resolved match inside a rating period."""

    player1: PlayerId
    player2: PlayerId
    winner: PlayerId
    weight: float


def process_rating_period(
    states: Mapping[PlayerId, RatingState],
    matches: list[PeriodMatch],
    engine: Glicko2Engine | None = None,
) -> dict[PlayerId, InternalRating]:
    """
    Rates every player in ``states`` for one period.

    All players are rated against the states as they stood before the
    period, so the order of ``matches`` does not matter. Players without a
    match only see their RD grow. Matches that reference a player missing
    from ``states`` are ignored.

    Returns:
        The new internal-scale (mu, phi, vol) for every player in ``states``.
    """
    engine = engine or Glicko2Engine()
    results: dict[PlayerId, list[tuple[RatingState, float, float]]] = {
        player_id: [] for player_id in states
    }

    for m in matches:
        if m.player1 not in states or m.player2 not in states:
            continue
        outcome1 = 1.0 if m.winner == m.player1 else 0.0
        outcome2 = 1.0 if m.winner == m.player2 else 0.0
        results[m.player1].append((states[m.player2], outcome1, m.weight))
        results[m.player2].append((states[m.player1], outcome2, m.weight))

    return {
        player_id: engine.rate(state, results[player_id])
        for player_id, state in states.items()
    }
