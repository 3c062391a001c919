from __future__ import annotations

from app.core.exceptions import PlanValidationError
from app.schemas.plans import ExamSession, HolidayPlanEntry
from app.schemas.schedule import CalendarDay, DayType, ScheduleConfig
from app.services.session_plans import exam_session_issues
from app.services.slot_codec import SlotCodec

HOLIDAY_DAY_TYPES = {
    "full_day": DayType.full_holiday,
    "half_day": DayType.half_holiday,
}


def _half_layout(config: ScheduleConfig) -> tuple[int, int | None, int]:
    """Column counts for the morning list (lunch included) and the afternoon list."""
    morning = 0
    lunch_index: int | None = None
    afternoon = 0
    for period in config.periods:
        half = config.period_half(period)
        if half == "afternoon":
            afternoon += 1
            continue
        if half == "lunch" and lunch_index is None:
            lunch_index = morning
        morning += 1
    return morning, lunch_index, afternoon


def apply_exam_session(
    session: ExamSession,
    day: CalendarDay | None,
    config: ScheduleConfig,
    codec: SlotCodec | None = None,
) -> CalendarDay:
    """Return the calendar day with the session's exam written over its slots.

    Lunch tokens in the morning list survive; everything else in the affected
    half becomes the exam token. The given day is left untouched.
    """
    issues = exam_session_issues(session)
    if issues:
        raise PlanValidationError("Exam session cannot be applied", issues=issues)
    codec = codec or SlotCodec.from_config(config)
    exam_slot = codec.exam_token(session.subject_code, session.session)
    lunch_slot = codec.lunch_token(session.class_id)
    morning_count, lunch_index, afternoon_count = _half_layout(config)

    if day is None:
        day = CalendarDay(date=session.date)
    morning = list(day.morning_slots)
    afternoon = list(day.afternoon_slots)

    if session.session in ("morning", "full_day"):
        replaced = [slot if codec.is_lunch(slot) else exam_slot for slot in morning]
        if len(replaced) < morning_count:
            rebuilt = [exam_slot] * morning_count
            kept_lunch = False
            for index, slot in enumerate(morning[:morning_count]):
                if codec.is_lunch(slot):
                    rebuilt[index] = slot
                    kept_lunch = True
            if not kept_lunch and lunch_index is not None:
                rebuilt[lunch_index] = lunch_slot
            replaced = rebuilt
        morning = replaced

    if session.session in ("afternoon", "full_day"):
        afternoon = [exam_slot] * max(len(afternoon), afternoon_count)

    return day.model_copy(update={"morning_slots": morning, "afternoon_slots": afternoon})


def apply_holiday(entry: HolidayPlanEntry, day: CalendarDay | None = None) -> CalendarDay:
    if day is None:
        day = CalendarDay(date=entry.date)
    return day.model_copy(
        update={
            "day_type": HOLIDAY_DAY_TYPES[entry.duration],
            "holiday_name": entry.holiday_name,
        }
    )
