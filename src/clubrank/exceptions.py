# src/clubrank/exceptions.py

"""Custom exception hierarchy for ClubRank.

This module provides a structured exception hierarchy that enables:
1. Proper HTTP status code mapping in API endpoints
2. Detailed error context for logging and debugging
3. Clear distinction between different error categories
"""

from __future__ import annotations


class ClubRankError(Exception):
    """Base exception for all ClubRank errors.

    Attributes:
        message: Human-readable error description
        details: Optional dict with additional context for logging/debugging
    """

    def __init__(self, message: str, details: dict | None = None) -> None:
        self.message = message
        self.details = details or {}
        super().__init__(message)


# =============================================================================
# Resource Not Found Errors (HTTP 404)
# =============================================================================


class ResourceNotFoundError(ClubRankError):
    """Base class for resource not found errors."""

    pass


class PlayerNotFoundError(ResourceNotFoundError):
    """Raised when a player ID does not exist."""

    def __init__(self, player_id: int) -> None:
        super().__init__(
            message=f"Player with ID {player_id} not found",
            details={"player_id": player_id},
        )


class MatchNotFoundError(ResourceNotFoundError):
    """Raised when a match ID does not exist or was deleted."""

    def __init__(self, match_id: int) -> None:
        super().__init__(
            message=f"Match with ID {match_id} not found",
            details={"match_id": match_id},
        )


# =============================================================================
# Validation Errors (HTTP 422)
# =============================================================================


class ValidationError(ClubRankError):
    """Base class for validation errors."""

    pass


class SamePlayerError(ValidationError):
    """Raised when both sides of a match are the same player."""

    def __init__(self, player_id: int) -> None:
        super().__init__(
            message=f"Player {player_id} cannot play against themselves",
            details={"player_id": player_id},
        )


class InvalidWinnerError(ValidationError):
    """Raised when the winner is not one of the two match players."""

    def __init__(self, winner_id: int, player_ids: list[int]) -> None:
        super().__init__(
            message=f"Winner {winner_id} is not a participant of the match",
            details={"winner_id": winner_id, "player_ids": player_ids},
        )


# =============================================================================
# Rating Engine Errors (HTTP 500)
# =============================================================================


class RatingEngineError(ClubRankError):
    """Base class for rating calculation errors."""

    pass


class VolatilityConvergenceError(RatingEngineError):
    """Raised when the Glicko-2 volatility solver cannot find its root.

    This only happens for inputs far outside the normal rating ranges and
    signals a programming error; no rating is produced.
    """

    def __init__(self, message: str, **context: float) -> None:
        super().__init__(message=message, details=dict(context))
