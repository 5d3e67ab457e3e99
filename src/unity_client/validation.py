"""Local input checks run before any request reaches the array."""

from __future__ import annotations

from .exceptions import ValidationError

NAME_MAX_LENGTH = 63

NAME_EMPTY = "name empty error"
NAME_TOO_LONG = "name too long error"
DURATION_OUT_OF_RANGE = "hours, minutes and seconds should be in between 0-60"
DURATION_BAD_FORMAT = "invalid retention duration format"

_SECONDS_PER_DAY = 86400


def require_id(value: str | None, message: str) -> str:
    """Return the stripped identifier or raise with ``message``."""

    cleaned = (value or "").strip()
    if not cleaned:
        raise ValidationError(message)
    return cleaned


def validate_name(name: str | None, max_length: int = NAME_MAX_LENGTH) -> str:
    cleaned = (name or "").strip()
    if not cleaned:
        raise ValidationError(NAME_EMPTY)
    if len(cleaned) > max_length:
        raise ValidationError(NAME_TOO_LONG)
    return cleaned


def parse_retention_duration(duration: str) -> int:
    """Convert ``days:hours:minutes:seconds`` into a number of seconds.

    Hours, minutes and seconds are accepted up to and including 60, which is
    the bound the array itself enforces.
    """

    parts = duration.strip().split(":")
    if len(parts) != 4:
        raise ValidationError(DURATION_BAD_FORMAT)
    try:
        days, hours, minutes, seconds = (int(part) for part in parts)
    except ValueError as exc:
        raise ValidationError(DURATION_BAD_FORMAT) from exc
    if days < 0:
        raise ValidationError(DURATION_BAD_FORMAT)
    for value in (hours, minutes, seconds):
        if value < 0 or value > 60:
            raise ValidationError(DURATION_OUT_OF_RANGE)
    return days * _SECONDS_PER_DAY + hours * 3600 + minutes * 60 + seconds
