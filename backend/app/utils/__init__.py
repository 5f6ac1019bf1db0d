from datetime import datetime, timezone


def utcnow() -> datetime:
    """Return the current UTC time as a timezone-aware datetime."""
    return datetime.now(timezone.utc)


def ensure_utc(dt: datetime) -> datetime:
    """Make a naive datetime timezone-aware (UTC). Already-aware datetimes pass through.

    MongoDB stores datetimes without tzinfo (naive). When you read a date field
    from a Mongo document and need to do arithmetic or comparison with utcnow()
    (which is tz-aware), wrap it with ensure_utc() first, otherwise Python
    raises "can't compare offset-naive and offset-aware datetimes".
    """
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def as_utc(dt: datetime | None) -> datetime | None:
    """None-safe UTC conversion for JSON serialization.

    Use at API response boundaries to ensure naive datetimes from MongoDB
    serialize with '+00:00' suffix. Without this the browser's Date()
    interprets the value as local time.
    """
    if dt is None:
        return None
    return ensure_utc(dt)


def parse_utc(value: str | datetime) -> datetime:
    """Parse a date string or datetime into a tz-aware UTC datetime.

    Handles ISO 8601 strings (with or without Z/offset) and bare datetimes.
    Raises ValueError for strings that are not ISO 8601.
    """
    if isinstance(value, datetime):
        return ensure_utc(value)
    return ensure_utc(datetime.fromisoformat(value.strip().replace("Z", "+00:00")))


def try_parse_utc(value: str | datetime | None) -> datetime | None:
    """Like parse_utc(), but returns None for empty, unparseable or out-of-range input."""
    """Like parse_utc(), but returns None for empty or unparseable input (or one outside the UTC range)."""
    if not value:
        return None
    if not isinstance(value, (str, datetime)):
        return None
    try:
        return parse_utc(value)
    except (ValueError, OverflowError):
        return None
