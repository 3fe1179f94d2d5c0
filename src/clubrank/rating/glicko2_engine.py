# src/clubrank/rating/glicko2_engine.py

"""
A from-scratch implementation of the Glicko-2 rating system, extended with
per-result weights.
The formulas and steps are based on the paper by Dr. Mark Glickman:
https://www.glicko.net/glicko/glicko2.pdf
"""

import math
from dataclasses import dataclass
from typing import NamedTuple

from clubrank.exceptions import VolatilityConvergenceError

GLICKO_SCALE = 173.7178
DEFAULT_RATING = 1500.0
DEFAULT_RD = 350.0
DEFAULT_VOLATILITY = 0.06

# The system constant, tau, constrains the change in volatility over time.
TAU = 0.5
EPSILON = 0.000001

# Upper bounds for the volatility solver loops. Normal inputs finish in a
# handful of steps; hitting either bound means the inputs are pathological.
MAX_BRACKET_STEPS = 1000
MAX_SOLVER_ITERATIONS = 10000


@dataclass
class RatingState:
    """Represents a player's rating in the standard Glicko scale."""

    rating: float = DEFAULT_RATING
    rd: float = DEFAULT_RD
    vol: float = DEFAULT_VOLATILITY


class InternalRating(NamedTuple):
    """A rating on the internal Glicko-2 scale."""

    mu: float
    phi: float
    vol: float


# ===============================================
# == Glicko-2 Formulas
# ===============================================


def to_internal(rating: float, rd: float) -> tuple[float, float]:
    """Step 2: convert a rating and RD to the Glicko-2 scale (mu, phi)."""
    return (rating - DEFAULT_RATING) / GLICKO_SCALE, rd / GLICKO_SCALE


def from_internal(mu: float, phi: float) -> tuple[float, float]:
    """Step 8: convert (mu, phi) back to the original Glicko scale."""
    return mu * GLICKO_SCALE + DEFAULT_RATING, phi * GLICKO_SCALE


def g(phi: float) -> float:
    """The g() function from the Glickman paper."""
    return 1 / math.sqrt(1 + 3 * phi**2 / math.pi**2)


def expected_score(mu: float, mu_j: float, phi_j: float) -> float:
    """The E() function, expected outcome against one opponent."""
    return 1 / (1 + math.exp(-g(phi_j) * (mu - mu_j)))


def solve_volatility(
    phi: float,
    v: float,
    delta: float,
    sigma: float,
    tau: float = TAU,
    epsilon: float = EPSILON,
) -> float:
    """
    Determines the new volatility `sigma'` (Step 5 of the paper).

    Finds the root of f(x) with x = ln(sigma'^2) using the Illinois variant of
    regula falsi. The bracket selection and the fA/2 damping step follow the
    paper exactly so results are reproducible across implementations.

    Raises:
        VolatilityConvergenceError: If no bracket or no root can be found.
    """
    a = math.log(sigma**2)
    delta_sq = delta**2
    phi_sq = phi**2
    tau_sq = tau**2

    def f(x: float) -> float:
        ex = math.exp(x)
        return (
            ex * (delta_sq - phi_sq - v - ex) / (2 * (phi_sq + v + ex) ** 2)
            - (x - a) / tau_sq
        )

    A = a
    if delta_sq > phi_sq + v:
        B = math.log(delta_sq - phi_sq - v)
    else:
        k = 1
        while f(a - k * tau) < 0:
            k += 1
            if k > MAX_BRACKET_STEPS:
                raise VolatilityConvergenceError(
                    "No sign change found while bracketing the volatility root",
                    phi=phi,
                    v=v,
                    delta=delta,
                    sigma=sigma,
                )
        B = a - k * tau

    f_A = f(A)
    f_B = f(B)

    iterations = 0
    while abs(B - A) > epsilon:
        iterations += 1
        if iterations > MAX_SOLVER_ITERATIONS:
            raise VolatilityConvergenceError(
                "Volatility iteration did not converge",
                phi=phi,
                v=v,
                delta=delta,
                sigma=sigma,
            )
        C = A + (A - B) * f_A / (f_B - f_A)
        f_C = f(C)
        if f_C * f_B < 0:
            A = B
            f_A = f_B
        else:
            f_A /= 2
        B = C
        f_B = f_C

    return math.exp(A / 2)


# ===============================================
# == Weighted Glicko-2 Engine
# ===============================================


class Glicko2Engine:
    """Encapsulates the weighted Glicko-2 calculation for one player."""

    def __init__(self, tau: float = TAU, epsilon: float = EPSILON):
        self._tau = tau
        self._epsilon = epsilon

    @property
    def tau(self) -> float:
        return self._tau

    def rate(
        self,
        player: RatingState,
        results: list[tuple[RatingState, float, float]],
    ) -> InternalRating:
        """
        Calculates a player's new internal rating from one rating period.

        Args:
            player: The player's rating before the period.
            results: ``(opponent_state, outcome, weight)`` for every match the
                player took part in. Outcome is 1 for a win, 0 for a loss.

        Returns:
            The new (mu, phi, vol) on the internal scale.
        """
        # Step 1 & 2: Convert to Glicko-2 scale
        mu, phi = to_internal(player.rating, player.rd)
        sigma = player.vol

        if not results:
            return self.idle(mu, phi, sigma)

        # Step 3: Compute the estimated variance of the player's rating.
        # Both sums are taken against the opponents' pre-period ratings.
        v_inv = 0.0
        improvement = 0.0
        for opponent, outcome, weight in results:
            mu_j, phi_j = to_internal(opponent.rating, opponent.rd)
            g_phi_j = g(phi_j)
            E = expected_score(mu, mu_j, phi_j)
            v_inv += weight * g_phi_j**2 * E * (1 - E)
            improvement += weight * g_phi_j * (outcome - E)

        # A period whose weights are all zero counts as a period without play
        if v_inv <= 0:
            return self.idle(mu, phi, sigma)

        v = 1 / v_inv

        # Step 4: Compute the estimated improvement in rating
        delta = v * improvement

        # Step 5: Determine the new volatility
        sigma_prime = solve_volatility(
            phi, v, delta, sigma, tau=self._tau, epsilon=self._epsilon
        )

        # Step 6: Update the rating deviation to the new pre-rating period value
        phi_star = math.sqrt(phi**2 + sigma_prime**2)

        # Step 7: Update the rating and rating deviation
        phi_prime = 1 / math.sqrt(1 / phi_star**2 + 1 / v)
        mu_prime = mu + phi_prime**2 * improvement

        return InternalRating(mu_prime, phi_prime, sigma_prime)

    @staticmethod
    def idle(mu: float, phi: float, sigma: float) -> InternalRating:
        """Only RD changes for a player who did not play (Step 6 of the paper)."""
        return InternalRating(mu, math.sqrt(phi**2 + sigma**2), sigma)
