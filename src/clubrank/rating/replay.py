# src/clubrank/rating/replay.py

"""
Full deterministic recompute of every player's rating from match history.

Matches are bucketed by calendar day and each day is one Glicko-2 rating
period for the whole roster. Days without any match between two processed
days are not iterated one by one; their RD growth is applied in one step.
"""

from __future__ import annotations

import logging
import math
from collections import defaultdict
from collections.abc import Iterable, Iterator
from datetime import date, datetime, timezone
from typing import NamedTuple

from .glicko2_engine import (
    DEFAULT_RD,
    GLICKO_SCALE,
    Glicko2Engine,
    RatingState,
    from_internal,
)
from .period import PeriodMatch, process_rating_period
from .records import MatchRecord, PlayerId, PlayerRating
from .tiers import assign_tier
from .weighting import WeightedMatch, WeightPolicy

logger = logging.getLogger(__name__)


class PeriodSnapshot(NamedTuple):
    """The outcome of one processed day.

    ``ratings`` is the replay's live mapping; read it before advancing the
    iterator if a value from this day is needed.
    """

    date: str
    matches: list[WeightedMatch]
    ratings: dict[PlayerId, PlayerRating]


def utc_today() -> date:
    return datetime.now(timezone.utc).date()


def bucket_by_date(matches: Iterable[MatchRecord]) -> list[tuple[str, list[MatchRecord]]]:
    """Group matches by their ``date``, oldest day first.

    ISO ``YYYY-MM-DD`` strings sort chronologically.
    """
    buckets: dict[str, list[MatchRecord]] = defaultdict(list)
    for match in matches:
        buckets[match.date].append(match)
    return [(day, buckets[day]) for day in sorted(buckets)]


def grow_for_inactivity(
    state: RatingState, days: int, ceiling: float = DEFAULT_RD
) -> RatingState:
    """
    Applies ``days`` empty rating periods at once: phi^2 += days * vol^2.

    The resulting RD is capped at ``ceiling``. An RD that is already above the
    ceiling is left where it is.
    """
    if days <= 0:
        return state
    phi = state.rd / GLICKO_SCALE
    grown = math.sqrt(phi**2 + days * state.vol**2)
    capped = min(grown, max(phi, ceiling / GLICKO_SCALE))
    return RatingState(state.rating, capped * GLICKO_SCALE, state.vol)


class RatingReplay:
    """Replays a complete match history for a roster of players."""

    def __init__(
        self,
        player_ids: Iterable[PlayerId],
        matches: Iterable[MatchRecord],
        policy: WeightPolicy | None = None,
        engine: Glicko2Engine | None = None,
    ):
        self._player_ids = list(dict.fromkeys(player_ids))
        self._matches = list(matches)
        self.policy = policy or WeightPolicy()
        self.engine = engine or Glicko2Engine()
        self.ratings: dict[PlayerId, PlayerRating] = {}
        self.adjustments: list[WeightedMatch] = []
        self.last_date: date | None = None

    def iter_periods(self) -> Iterator[PeriodSnapshot]:
        """
        Advances every player through every match day, oldest first.

        Starts from default ratings each time it is called.
        """
        self.ratings = {player_id: PlayerRating() for player_id in self._player_ids}
        self.adjustments = []
        self.last_date = None
        roster = set(self.ratings)

        for day, day_matches in bucket_by_date(self._matches):
            current = date.fromisoformat(day)
            if self.last_date is not None:
                self._grow_all((current - self.last_date).days - 1)

            weighted = self.policy.weigh_day(day_matches, roster)
            period = self._build_period(day, weighted)
            self._apply_period(period)

            self.last_date = current
            yield PeriodSnapshot(day, weighted, self.ratings)

    def run(self, today: date | None = None) -> dict[PlayerId, PlayerRating]:
        """Replays all days, then grows RD for the empty days up to ``today``."""
        periods = 0
        for _ in self.iter_periods():
            periods += 1

        if self.last_date is not None:
            today = today or utc_today()
            # Today's period is still open, so only full days in between count
            self._grow_all((today - self.last_date).days - 1)

        logger.info(
            "Replayed rating history",
            extra={
                "player_count": len(self.ratings),
                "match_count": len(self._matches),
                "period_count": periods,
                "adjustment_count": len(self.adjustments),
            },
        )
        return self.ratings

    def _build_period(self, day: str, weighted: list[WeightedMatch]) -> list[PeriodMatch]:
        period = []
        for item in weighted:
            match = item.match
            if item.adjustments:
                self.adjustments.append(item)
                logger.debug(
                    "Match weight adjusted",
                    extra={
                        "date": day,
                        "match_id": match.match_id,
                        "players": [match.player_a, match.player_b],
                        "adjustments": list(item.adjustments),
                        "weight": item.weight,
                    },
                )
            if item.weight <= 0 or match.winner is None:
                continue
            self.ratings[match.player_a].meta.total_rated_matches += 1
            self.ratings[match.player_b].meta.total_rated_matches += 1
            period.append(
                PeriodMatch(match.player_a, match.player_b, match.winner, item.weight)
            )
        return period

    def _apply_period(self, period: list[PeriodMatch]) -> None:
        states = {player_id: record.state for player_id, record in self.ratings.items()}
        updates = process_rating_period(states, period, self.engine)

        for player_id, update in updates.items():
            rating, rd = from_internal(update.mu, update.phi)
            record = self.ratings[player_id]
            record.state = RatingState(rating, rd, update.vol)
            record.meta.peak_rating = max(record.meta.peak_rating, rating)
            record.meta.earned_tier = assign_tier(
                rating, record.meta.total_rated_matches, record.meta.earned_tier
            )

    def _grow_all(self, days: int) -> None:
        if days <= 0:
            return
        for record in self.ratings.values():
            record.state = grow_for_inactivity(record.state, days)


def replay_ratings(
    player_ids: Iterable[PlayerId],
    matches: Iterable[MatchRecord],
    today: date | None = None,
    policy: WeightPolicy | None = None,
    engine: Glicko2Engine | None = None,
) -> dict[PlayerId, PlayerRating]:
    """Recomputes every player's rating and metadata from scratch."""
    return RatingReplay(player_ids, matches, policy=policy, engine=engine).run(today)
