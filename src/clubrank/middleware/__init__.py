# src/clubrank/middleware/__init__.py

"""Middleware components for ClubRank API."""

from .logging import REQUEST_ID_HEADER, RequestLoggingMiddleware

__all__ = ["REQUEST_ID_HEADER", "RequestLoggingMiddleware"]
