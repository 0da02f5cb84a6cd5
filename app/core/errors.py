"""Application-level exception types.

Only the errors defined here reach the caller as non-200 responses. Row
validation failures and store outages are absorbed where they happen.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from app.adapters.rate_limit.base import RateLimitResult


@dataclass
class AppError(Exception):
    """Base error for application/domain failures.

    Attributes:
        code: Stable, machine-readable error code.
        message: Human-readable error message (rendered as ``error``).
        details: Optional free-text context (rendered as ``details``).
    """

    code: str
    message: str
    details: str | None = None

    status_code = 500

    def __post_init__(self) -> None:
        # Populate Exception args so str(error) is useful in logs/tracebacks.
        super().__init__(self.message)


class ConfigurationAppError(AppError):
    """Raised when required server configuration (e.g. origin credential) is missing."""

    status_code = 500


class UpstreamAppError(AppError):
    """Raised when the origin spreadsheet API fails or answers non-2xx."""

    status_code = 502


@dataclass
class RateLimitExceededAppError(AppError):
    """Raised by admission control before any cache or origin work happens."""

    result: RateLimitResult | None = field(default=None, repr=False)

    status_code = 429
