"""Article age computation and the recency window filter."""

from datetime import UTC, datetime

# Age reported for missing or unparsable timestamps; larger than any window.
STALE_HOURS = float("inf")


def parse_published_at(value: str | None) -> datetime | None:
    """Parse an ISO 8601 timestamp, returning None when it cannot be read.

    Naive timestamps are taken to be UTC.
    """
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value.strip())
    except (ValueError, TypeError):
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


def hours_since(published_at: str | None, now: datetime | None = None) -> float:
    """Hours elapsed since ``published_at``.

    Args:
        published_at: Publication timestamp as returned by the provider.
        now: Reference time (defaults to the current UTC time).

    Returns:
        Elapsed hours, or ``STALE_HOURS`` if the timestamp is missing or malformed.
    """
    parsed = parse_published_at(published_at)
    if parsed is None:
        return STALE_HOURS
    reference = now or datetime.now(tz=UTC)
    return (reference - parsed).total_seconds() / 3600


def is_recent(published_at: str | None, window_hours: float, now: datetime | None = None) -> bool:
    """Whether an article falls inside the recency window."""
    return hours_since(published_at, now) <= window_hours
