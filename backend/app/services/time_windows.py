from __future__ import annotations
from datetime import datetime, timezone as dt_tz
from typing import Literal

WindowState = Literal["upcoming", "open", "passed", "unscheduled"]


def ensure_utc(dt: datetime) -> datetime:
    """
    Normalize a datetime to an aware UTC datetime.

    Naive values are taken to already be UTC (the portal API emits UTC ISO strings
    and older records drop the offset).

    Examples:
        >>> from datetime import datetime
        >>> ensure_utc(datetime(2025, 1, 10)).isoformat()
        '2025-01-10T00:00:00+00:00'
    """
    if dt.tzinfo is None:
        return dt.replace(tzinfo=dt_tz.utc)
    return dt.astimezone(dt_tz.utc)


def submission_window(hackathon) -> tuple[datetime | None, datetime | None]:
    """
    Return the (opens_at, deadline) submission window of a hackathon.

    Submissions open at `startDate`; the deadline is `submissionDeadline`, falling
    back to `endDate` for hackathons created before the deadline field existed.
    """
    deadline = hackathon.submission_deadline or hackathon.end_date
    return hackathon.start_date, deadline


def window_state(now: datetime, opens_at: datetime | None, deadline: datetime | None) -> WindowState:
    """
    Classify `now` against a submission window. Both ends are inclusive.

    Examples:
        >>> from datetime import datetime, timezone
        >>> s = datetime(2025, 1, 10, tzinfo=timezone.utc)
        >>> e = datetime(2025, 1, 20, tzinfo=timezone.utc)
        >>> window_state(datetime(2025, 1, 5, tzinfo=timezone.utc), s, e)
        'upcoming'
        >>> window_state(e, s, e)
        'open'
    """
    if opens_at is None and deadline is None:
        return "unscheduled"
    now = ensure_utc(now)
    if opens_at is not None and now < ensure_utc(opens_at):
        return "upcoming"
    if deadline is not None and now > ensure_utc(deadline):
        return "passed"
    return "open"


def deadline_passed(now: datetime, deadline: datetime | None) -> bool:
    return deadline is not None and ensure_utc(now) > ensure_utc(deadline)
