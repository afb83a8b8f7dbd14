"""UTC datetime utilities."""

from datetime import datetime, timezone


def utc_now() -> datetime:
    """Return timezone-aware UTC now."""
    return datetime.now(timezone.utc)


def is_past(moment: datetime | None, now: datetime | None = None) -> bool:
    """True when ``moment`` is set and not after ``now``.

    A deadline equal to ``now`` counts as passed: closing stamps ``end_date``
    with the same instant it then compares against.
    """
    if moment is None:
        return False
    return moment <= (now or utc_now())
