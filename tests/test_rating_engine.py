# tests/test_rating_engine.py

"""Unit tests for the weighted Glicko-2 engine."""

import pytest
from clubrank.rating.glicko2_engine import (
    Glicko2Engine,
    RatingState,
    from_internal,
    to_internal,
)


def _rate(engine: Glicko2Engine, player: RatingState, results) -> RatingState:
    """Run the engine and convert back to the display scale."""
    new = engine.rate(player, results)
    rating, rd = from_internal(new.mu, new.phi)
    return RatingState(rating, rd, new.vol)


def test_glicko2_engine_basic_win():
    """Test that winning increases rating and losing decreases it."""
    engine = Glicko2Engine()

    player1 = RatingState()
    player2 = RatingState()

    winner = _rate(engine, player1, [(player2, 1.0, 1.0)])
    loser = _rate(engine, player2, [(player1, 0.0, 1.0)])

    assert winner.rating > 1500.0
    assert loser.rating < 1500.0


def test_glicko2_engine_single_win_between_new_players():
    """
    Two brand-new players, one full-weight match: the well-known
    1662.3 / 290.3 result for the winner and its mirror for the loser.
    """
    engine = Glicko2Engine()

    winner = _rate(engine, RatingState(), [(RatingState(), 1.0, 1.0)])
    loser = _rate(engine, RatingState(), [(RatingState(), 0.0, 1.0)])

    assert winner.rating == pytest.approx(1662.3, abs=0.1)
    assert winner.rd == pytest.approx(290.3, abs=0.1)
    assert winner.vol == pytest.approx(0.06, abs=1e-4)
    assert loser.rating == pytest.approx(1337.7, abs=0.1)
    assert loser.rd == pytest.approx(290.3, abs=0.1)


def test_glicko2_engine_paper_example():
    """The three-opponent example from the Glickman paper."""
    engine = Glicko2Engine()
    player = RatingState(1500.0, 200.0, 0.06)
    results = [
        (RatingState(1400.0, 30.0, 0.06), 1.0, 1.0),
        (RatingState(1550.0, 100.0, 0.06), 0.0, 1.0),
        (RatingState(1700.0, 300.0, 0.06), 0.0, 1.0),
    ]

    new = _rate(engine, player, results)

    assert new.rating == pytest.approx(1464.06, abs=0.05)
    assert new.rd == pytest.approx(151.52, abs=0.05)
    assert new.vol == pytest.approx(0.05999, abs=1e-5)


def test_short_format_weight_moves_rating_less():
    """A 0.6-weight result moves the rating less than a full-weight one."""
    engine = Glicko2Engine()
    player = RatingState()
    opponent = RatingState()

    full = _rate(engine, player, [(opponent, 1.0, 1.0)])
    short = _rate(engine, player, [(opponent, 1.0, 0.6)])

    assert 1500.0 < short.rating < full.rating
    assert short.rd > full.rd


def test_zero_weight_results_count_as_idle_period():
    """Results that carry no weight only grow RD, like not playing at all."""
    engine = Glicko2Engine()
    player = RatingState(1600.0, 100.0, 0.06)

    idle = _rate(engine, player, [])
    weightless = _rate(engine, player, [(RatingState(), 1.0, 0.0)])

    assert weightless == idle
    assert idle.rating == pytest.approx(1600.0)
    assert idle.rd > 100.0


def test_glicko2_engine_high_rd_larger_changes():
    """Test that players with high RD have larger rating changes."""
    engine = Glicko2Engine()

    high_rd_player = RatingState(1500.0, 350.0, 0.06)
    low_rd_player = RatingState(1500.0, 50.0, 0.06)
    opponent = RatingState(1500.0, 200.0, 0.06)

    high_rd_result = _rate(engine, high_rd_player, [(opponent, 1.0, 1.0)])
    low_rd_result = _rate(engine, low_rd_player, [(opponent, 1.0, 1.0)])

    assert (high_rd_result.rating - 1500.0) > (low_rd_result.rating - 1500.0)


def test_glicko2_engine_rd_decreases_after_play():
    engine = Glicko2Engine()

    new = _rate(engine, RatingState(), [(RatingState(), 1.0, 1.0)])

    assert new.rd < 350.0


def test_glicko2_engine_upset_win_larger_gain():
    """Test that beating a higher-rated player gives larger rating increase."""
    engine = Glicko2Engine()

    underdog = RatingState(1000.0, 200.0, 0.06)
    favorite = RatingState(2000.0, 200.0, 0.06)
    equal = RatingState(1000.0, 200.0, 0.06)

    upset = _rate(engine, underdog, [(favorite, 1.0, 1.0)])
    normal = _rate(engine, underdog, [(equal, 1.0, 1.0)])

    assert (upset.rating - 1000.0) > (normal.rating - 1000.0)


def test_idle_keeps_mu_and_sigma():
    mu, phi = to_internal(1712.0, 80.0)

    new = Glicko2Engine.idle(mu, phi, 0.07)

    assert new.mu == mu
    assert new.vol == 0.07
    assert new.phi == pytest.approx((phi**2 + 0.07**2) ** 0.5)


def test_custom_tau_is_used():
    engine = Glicko2Engine(tau=0.3)

    assert engine.tau == 0.3
