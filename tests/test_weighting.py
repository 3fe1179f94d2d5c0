# tests/test_weighting.py

"""Tests for match weights and the anti-manipulation rules."""

from datetime import datetime, timedelta, timezone

import pytest
from clubrank.rating.records import MatchRecord
from clubrank.rating.weighting import (
    DAILY_CAP_EXCEEDED,
    REPEATED_OPPONENT_BLOCKED,
    REPEATED_OPPONENT_REDUCED,
    WeightPolicy,
    pair_key,
)

DAY_START = datetime(2025, 3, 14, 9, 0, tzinfo=timezone.utc)


def _match(a, b, winner, minute=0, points=20, is_rated=True, match_id=None):
    return MatchRecord(
        player_a=a,
        player_b=b,
        winner=winner,
        points=points,
        is_rated=is_rated,
        date="2025-03-14",
        recorded_at=DAY_START + timedelta(minutes=minute),
        match_id=match_id,
    )


def test_base_weight_by_format_and_rated_flag():
    policy = WeightPolicy()

    assert policy.base_weight(_match(1, 2, 1, points=20)) == 1.0
    assert policy.base_weight(_match(1, 2, 1, points=10)) == 0.6
    assert policy.base_weight(_match(1, 2, 1, is_rated=False)) == 0.0


def test_pair_key_ignores_order():
    assert pair_key(4, 2) == pair_key(2, 4) == (2, 4)


def test_repeated_opponent_weights():
    """Meetings 1-3 count fully, 4-5 are halved, the 6th counts for nothing."""
    matches = [_match(1, 2, 1, minute=i) for i in range(6)]

    weighted = WeightPolicy().weigh_day(matches)

    assert [item.weight for item in weighted] == [1.0, 1.0, 1.0, 0.5, 0.5, 0.0]
    assert weighted[3].adjustments == (REPEATED_OPPONENT_REDUCED,)
    # The 6th meeting also breaks the daily cap; the cap wins
    assert weighted[5].adjustments == (DAILY_CAP_EXCEEDED,)


def test_repeated_opponent_halves_short_format():
    matches = [_match(1, 2, 2, minute=i, points=10) for i in range(4)]

    weighted = WeightPolicy().weigh_day(matches)

    assert weighted[3].weight == pytest.approx(0.3)


def test_repeated_opponent_blocked_below_daily_cap():
    """With a higher daily cap the 6th meeting is blocked by the pair rule."""
    matches = [_match(1, 2, 1, minute=i) for i in range(6)]

    weighted = WeightPolicy(daily_match_cap=10).weigh_day(matches)

    assert weighted[5].weight == 0.0
    assert weighted[5].adjustments == (REPEATED_OPPONENT_BLOCKED,)


def test_daily_cap_zeroes_sixth_and_later_matches():
    """Ten matches against ten different opponents: only five count."""
    matches = [_match(1, 100 + i, 1, minute=i) for i in range(10)]

    weighted = WeightPolicy().weigh_day(matches)

    assert [item.weight for item in weighted] == [1.0] * 5 + [0.0] * 5
    assert all(DAILY_CAP_EXCEEDED in item.adjustments for item in weighted[5:])


def test_daily_cap_applies_to_either_player():
    """Player 2 is at the cap even though player 3 is fresh."""
    matches = [_match(2, 10 + i, 2, minute=i) for i in range(5)]
    matches.append(_match(3, 2, 3, minute=10))

    weighted = WeightPolicy().weigh_day(matches)

    assert weighted[-1].weight == 0.0


def test_casual_matches_do_not_count_toward_limits():
    """Casual matches weigh 0 and leave the day's counters untouched."""
    casual = [_match(1, 2, 1, minute=i, is_rated=False) for i in range(6)]
    rated = [_match(1, 2, 1, minute=10 + i) for i in range(3)]

    weighted = WeightPolicy().weigh_day(casual + rated)

    assert [item.weight for item in weighted] == [0.0] * 6 + [1.0] * 3
    assert all(item.adjustments == () for item in weighted)


def test_weigh_day_sorts_by_recording_time():
    """Counters follow recorded_at, not the order matches were passed in."""
    late = _match(1, 2, 1, minute=50, match_id=4)
    early = [_match(1, 2, 1, minute=i, match_id=i) for i in range(3)]

    weighted = WeightPolicy().weigh_day([late] + early)

    assert [item.match.match_id for item in weighted] == [0, 1, 2, 4]
    assert weighted[-1].weight == 0.5


def test_unresolved_matches_are_dropped_before_counting():
    unresolved = [_match(1, 2, None, minute=i) for i in range(5)]
    resolved = _match(1, 2, 1, minute=30)

    weighted = WeightPolicy().weigh_day(unresolved + [resolved])

    assert len(weighted) == 1
    assert weighted[0].weight == 1.0


def test_matches_outside_roster_are_dropped():
    matches = [_match(1, 99, 1, minute=0), _match(1, 2, 2, minute=1)]

    weighted = WeightPolicy().weigh_day(matches, roster={1, 2})

    assert [item.match.player_b for item in weighted] == [2]
