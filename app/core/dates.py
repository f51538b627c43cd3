from datetime import datetime, timezone


def utcnow():
    return datetime.now(timezone.utc)


def as_utc(value):
    if value is None:
        return None
    if value.tzinfo is None:
        # SQLite hands back naive datetimes; they were stored as UTC
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def days_since(value, now=None):
    value = as_utc(value)
    if value is None:
        return None
    now = as_utc(now) if now is not None else utcnow()
    return (now - value).days
