from datetime import date, datetime, time, timezone


def to_utc(value: date | datetime) -> datetime:
    """Normalise a journey date or timestamp to an aware UTC datetime.

    Plain dates are taken as UTC midnight. Naive datetimes are rejected.
    """
    if not isinstance(value, datetime):
        return datetime.combine(value, time.min, tzinfo=timezone.utc)
    if value.tzinfo is None:
        raise ValueError("datetime must be timezone-aware")
    return value.astimezone(timezone.utc)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)
