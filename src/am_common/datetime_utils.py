"""UTC datetime utilities."""

from datetime import datetime, timezone


def utc_now() -> datetime:
    """Return timezone-aware UTC now."""
    return datetime.now(timezone.utc)


def age_in_days(since: datetime | None, now: datetime | None = None) -> int:
    """Whole days elapsed since ``since``; 0 when unknown or in the future."""
    if since is None:
        return 0
    if since.tzinfo is None:
        since = since.replace(tzinfo=timezone.utc)
    delta = (now or utc_now()) - since
    return max(delta.days, 0)
