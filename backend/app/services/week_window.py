from __future__ import annotations

from datetime import date, datetime, timedelta
from zoneinfo import ZoneInfo

from app.schemas.schedule import DAY_NAMES, WeekDay, WeekWindow

BUSINESS_DAYS_PER_WEEK = 6


def week_label(week_offset: int) -> str:
    if week_offset == 0:
        return "Current Week"
    if week_offset == 1:
        return "Next Week"
    if week_offset == -1:
        return "Previous Week"
    if week_offset > 1:
        return f"{week_offset} Weeks Ahead"
    return f"{abs(week_offset)} Weeks Ago"


def reference_date_in(timezone_name: str, now: datetime | None = None) -> date:
    """Calendar date of ``now`` as seen in the school's timezone.

    Naive instants are taken to be UTC. Everything downstream works on the
    returned date only, so DST shifts never move a week boundary.
    """
    zone = ZoneInfo(timezone_name)
    if now is None:
        return datetime.now(zone).date()
    if now.tzinfo is None:
        now = now.replace(tzinfo=ZoneInfo("UTC"))
    return now.astimezone(zone).date()


def monday_of(reference_date: date) -> date:
    if isinstance(reference_date, datetime):
        reference_date = reference_date.date()
    return reference_date - timedelta(days=reference_date.weekday())


def resolve_week(reference_date: date, week_offset: int = 0) -> WeekWindow:
    start = monday_of(reference_date) + timedelta(weeks=week_offset)
    days = [
        WeekDay(
            date=start + timedelta(days=index),
            day_of_week=index + 1,
            day_name=DAY_NAMES[index],
        )
        for index in range(BUSINESS_DAYS_PER_WEEK)
    ]
    return WeekWindow(
        week_offset=week_offset,
        days=days,
        start_date=days[0].date,
        end_date=days[-1].date,
        is_current_week=week_offset == 0,
        label=week_label(week_offset),
    )
