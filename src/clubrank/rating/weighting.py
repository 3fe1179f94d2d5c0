# src/clubrank/rating/weighting.py

"""
Match weighting: how much a single match is allowed to move ratings.

The base weight depends on the match format and whether it was rated. Two
anti-manipulation rules then apply per calendar day, in recording order:

- Daily cap: only the first ``daily_match_cap`` rated matches of a player on a
  given day count.
- Repeated opponent: meeting the same opponent a 4th and 5th time on one day
  halves the weight; a 6th meeting and beyond counts for nothing.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Collection, Iterable
from dataclasses import dataclass

from .records import MatchRecord, PlayerId

FULL_FORMAT_POINTS = 20
SHORT_FORMAT_POINTS = 10

# Names reported for each anti-manipulation adjustment
DAILY_CAP_EXCEEDED = "daily_cap_exceeded"
REPEATED_OPPONENT_REDUCED = "repeated_opponent_reduced"
REPEATED_OPPONENT_BLOCKED = "repeated_opponent_blocked"


@dataclass(frozen=True)
class WeightedMatch:
    """A match paired with the weight it carries into its rating period."""

    match: MatchRecord
    weight: float
    adjustments: tuple[str, ...] = ()


def pair_key(player_a: PlayerId, player_b: PlayerId) -> tuple[PlayerId, PlayerId]:
    """Key an unordered pair of players so both orders collide."""
    first, second = sorted((player_a, player_b))
    return first, second


def recording_order(matches: Iterable[MatchRecord]) -> list[MatchRecord]:
    """Sort matches by ``recorded_at``; ties keep their input order."""
    return sorted(matches, key=lambda m: m.recorded_at)


@dataclass(frozen=True)
class WeightPolicy:
    """Converts raw matches into rating weights in [0, 1]."""

    full_format_weight: float = 1.0
    short_format_weight: float = 0.6
    daily_match_cap: int = 5
    pair_reduce_from: int = 4
    pair_block_from: int = 6
    pair_reduce_factor: float = 0.5

    def base_weight(self, match: MatchRecord) -> float:
        """Weight from format and rated flag alone."""
        if match.is_rated is False:
            return 0.0
        if match.points == SHORT_FORMAT_POINTS:
            return self.short_format_weight
        return self.full_format_weight

    def weigh_day(
        self,
        matches: Iterable[MatchRecord],
        roster: Collection[PlayerId] | None = None,
    ) -> list[WeightedMatch]:
        """
        Weighs all matches of one calendar day.

        Matches are first put in recording order because the daily counters
        are cumulative. Unresolved matches (no winner) and matches involving a
        player outside ``roster`` are dropped before any counter moves.

        Returns:
            One WeightedMatch per remaining match, in recording order. Casual
            and capped matches are kept with weight 0.
        """
        counters = DailyCounters()
        weighted = []
        for match in recording_order(matches):
            if match.winner is None:
                continue
            if roster is not None and (
                match.player_a not in roster or match.player_b not in roster
            ):
                continue
            weighted.append(self.weigh(match, counters))
        return weighted

    def weigh(self, match: MatchRecord, counters: "DailyCounters") -> WeightedMatch:
        """Weighs one match against (and advances) the counters of its day."""
        weight = self.base_weight(match)
        if weight <= 0:
            return WeightedMatch(match, 0.0)

        player_counts = counters.count_players(match.player_a, match.player_b)
        meetings = counters.count_pair(match.player_a, match.player_b)

        adjustments: list[str] = []
        if max(player_counts) > self.daily_match_cap:
            weight = 0.0
            adjustments.append(DAILY_CAP_EXCEEDED)

        if weight > 0:
            if meetings >= self.pair_block_from:
                weight = 0.0
                adjustments.append(REPEATED_OPPONENT_BLOCKED)
            elif meetings >= self.pair_reduce_from:
                weight *= self.pair_reduce_factor
                adjustments.append(REPEATED_OPPONENT_REDUCED)

        return WeightedMatch(match, weight, tuple(adjustments))


class DailyCounters:
    """Per-day tallies of rated matches by player and by pairing."""

    def __init__(self) -> None:
        self.by_player: Counter[PlayerId] = Counter()
        self.by_pair: Counter[tuple[PlayerId, PlayerId]] = Counter()

    def count_players(self, player_a: PlayerId, player_b: PlayerId) -> tuple[int, int]:
        self.by_player[player_a] += 1
        self.by_player[player_b] += 1
        return self.by_player[player_a], self.by_player[player_b]

    def count_pair(self, player_a: PlayerId, player_b: PlayerId) -> int:
        key = pair_key(player_a, player_b)
        self.by_pair[key] += 1
        return self.by_pair[key]
