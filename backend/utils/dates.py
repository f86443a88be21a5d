"""UTC calendar-day helpers."""

from datetime import date, datetime, timedelta, timezone


def utc_today() -> date:
    """Today's date in UTC."""
    return datetime.now(timezone.utc).date()


def to_utc_day(value: date | datetime | str | None = None) -> date:
    """Normalize a date, datetime or ISO string to its UTC calendar day.

    Naive datetimes are assumed to already be UTC. ``None`` means today.

    Args:
        value: The value to normalize.

    Returns:
        The UTC calendar date.

    Raises:
        ValueError: If a string cannot be parsed as an ISO date/datetime.
    """
    if value is None:
        return utc_today()
    if isinstance(value, str):
        value = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc)
        return value.date()
    return value


def day_range(end: date, days: int) -> list[date]:
    """Return ``days`` consecutive dates ending at ``end`` (oldest first)."""
    return [end - timedelta(days=offset) for offset in range(days - 1, -1, -1)]


def parse_range_days(value: str | None, default: int = 30, maximum: int = 365) -> int:
    """Parse a range string like ``"30d"`` into a day count.

    Invalid or non-positive values fall back to ``default``; the result is
    capped at ``maximum``.
    """
    if not value:
        return default
    text = value.strip().lower()
    if text.endswith("d"):
        text = text[:-1]
    try:
        days = int(text)
    except ValueError:
        return default
    if days <= 0:
        return default
    return min(days, maximum)
