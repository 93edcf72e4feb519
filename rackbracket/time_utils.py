from datetime import UTC, datetime


def utcnow_naive():
    """Return current UTC timestamp as naive datetime for DB timestamp columns."""
    return datetime.now(UTC).replace(tzinfo=None)


def isoformat_or_none(value):
    return value.isoformat() if value else None
