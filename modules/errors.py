"""Exceptions raised by the leaderboard domain."""

from __future__ import annotations


class LeaderboardError(Exception):
    """Base class for leaderboard failures surfaced to callers."""

    status_code = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(LeaderboardError):
    """Submitted data was rejected; the client should fix the request."""

    status_code = 400


class StorageError(LeaderboardError):
    """The durable record could not be written."""

    status_code = 500


__all__ = ["LeaderboardError", "ValidationError", "StorageError"]
