from __future__ import annotations

from typing import Optional


class ScoringError(Exception):
    """Base class for errors raised while scoring a round.

    ``field`` names the input (or configuration key) that was rejected so the
    caller can report the problem precisely.
    """

    def __init__(self, message: str, field: Optional[str] = None) -> None:
        super().__init__(message)
        self.field = field


class ValidationError(ScoringError, ValueError):
    """Malformed scorecard input (shape, counts, dates)."""


class ConfigurationError(ScoringError, ValueError):
    """Points system, event or course setup is missing or invalid."""
