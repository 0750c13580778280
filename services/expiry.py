"""Expiry of a mapping: either it never expires or it expires at a moment.

All timestamps are naive UTC.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional, Union

from services.exceptions import InvalidExpiryError


def utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


@dataclass(frozen=True)
class Never:
    @property
    def at(self) -> None:
        return None

    def is_past(self, now: datetime) -> bool:
        return False


@dataclass(frozen=True)
class ExpiresAt:
    at: datetime

    def is_past(self, now: datetime) -> bool:
        return now > self.at


Expiry = Union[Never, ExpiresAt]

NEVER = Never()


def expiry_from(expires_at: Optional[datetime]) -> Expiry:
    if expires_at is None:
        return NEVER
    return ExpiresAt(expires_at)


def compute_expiry(now: datetime, expires_in_days: Optional[int], default_expiry_days: int) -> Expiry:
    """Caller-supplied days win, then the configured default; 0 or less means none.

    Raises:
        InvalidExpiryError: the resulting moment is past ``datetime.max``.
    """
    if expires_in_days is not None and expires_in_days > 0:
        days = expires_in_days
    elif default_expiry_days > 0:
        days = default_expiry_days
    else:
        return NEVER
    try:
        return ExpiresAt(now + timedelta(days=days))
    except OverflowError as exc:
        raise InvalidExpiryError(f"Expiry of {days} days is out of range") from exc
