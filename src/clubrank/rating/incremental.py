# src/clubrank/rating/incremental.py

"""
Fast-path rating update for a single newly recorded match.

The update is a one-match rating period run through the same routine as the
full replay. It does not grow RD for idle days and does not touch any other
player, so a periodic full replay remains the source of truth.
"""

from __future__ import annotations

import copy
import logging
from collections.abc import Iterable

from .glicko2_engine import Glicko2Engine, RatingState, from_internal
from .period import PeriodMatch, process_rating_period
from .records import MatchRecord, PlayerId, PlayerMeta, PlayerRating
from .tiers import assign_tier
from .weighting import WeightPolicy

logger = logging.getLogger(__name__)


def incremental_weight(
    match: MatchRecord,
    same_day_matches: Iterable[MatchRecord] | None,
    policy: WeightPolicy,
) -> float:
    """
    Weight of ``match`` on the fast path.

    With the other matches of the same day available, the daily counters are
    re-derived and the match is weighed in its recording position. Without
    them only the format and rated flag are taken into account.
    """
    if same_day_matches is None:
        return policy.base_weight(match)

    day = [
        m
        for m in same_day_matches
        if m.date == match.date
        and m is not match
        and (match.match_id is None or m.match_id != match.match_id)
    ]
    day.append(match)
    for item in policy.weigh_day(day):
        if item.match is match:
            return item.weight
    # Unresolved matches are dropped by weigh_day
    return 0.0


def update_ratings_incremental(
    rating_a: PlayerRating,
    rating_b: PlayerRating,
    match: MatchRecord,
    same_day_matches: Iterable[MatchRecord] | None = None,
    policy: WeightPolicy | None = None,
    engine: Glicko2Engine | None = None,
) -> dict[PlayerId, PlayerRating]:
    """
    Updates the two players of ``match`` without replaying history.

    Args:
        rating_a: Current rating of ``match.player_a``
        rating_b: Current rating of ``match.player_b``
        match: The new match
        same_day_matches: Matches already recorded on the same day, if known
        policy: Weight policy, defaults to the standard one
        engine: Glicko-2 engine, defaults to the standard one

    Returns:
        New records for both players. Matches that carry no weight return
        unchanged copies of the inputs.
    """
    policy = policy or WeightPolicy()
    unchanged = {
        match.player_a: copy.deepcopy(rating_a),
        match.player_b: copy.deepcopy(rating_b),
    }
    if match.winner is None:
        return unchanged

    weight = incremental_weight(match, same_day_matches, policy)
    if weight <= 0:
        logger.debug(
            "Match carries no rating weight",
            extra={"match_id": match.match_id, "is_rated": match.is_rated},
        )
        return unchanged

    states = {match.player_a: rating_a.state, match.player_b: rating_b.state}
    updates = process_rating_period(
        states,
        [PeriodMatch(match.player_a, match.player_b, match.winner, weight)],
        engine,
    )

    result = {}
    for player_id, previous in ((match.player_a, rating_a), (match.player_b, rating_b)):
        update = updates[player_id]
        rating, rd = from_internal(update.mu, update.phi)
        total = previous.meta.total_rated_matches + 1
        result[player_id] = PlayerRating(
            state=RatingState(rating, rd, update.vol),
            meta=PlayerMeta(
                total_rated_matches=total,
                earned_tier=assign_tier(rating, total, previous.meta.earned_tier),
                peak_rating=max(previous.meta.peak_rating, rating),
            ),
        )
    return result
