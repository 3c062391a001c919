from __future__ import annotations

import logging
from collections.abc import Sequence
from datetime import date, timedelta
from enum import Enum

from pydantic import ValidationError

from app.core.exceptions import DraftStateError, PlanValidationError
from app.schemas.plans import (
    ALL_CLASSES,
    ExamSession,
    ExamType,
    HolidayDuration,
    HolidayPlanEntry,
)
from app.schemas.schedule import DAY_NAMES
from app.schemas.slots import ExamToken

logger = logging.getLogger(__name__)

WEEKEND_WEEKDAYS = {5, 6}

EXAM_SESSIONS_BY_TYPE: dict[str, tuple[str, ...]] = {
    "one_per_day": ("full_day",),
    "two_per_day": ("morning", "afternoon"),
}


def expand_dates(start_date: date, end_date: date, *, skip_weekends: bool = False) -> list[date]:
    days: list[date] = []
    current = start_date
    while current <= end_date:
        if not (skip_weekends and current.weekday() in WEEKEND_WEEKDAYS):
            days.append(current)
        current += timedelta(days=1)
    return days


def check_date_range(start_date: date, end_date: date) -> None:
    if end_date < start_date:
        raise PlanValidationError(
            "End date cannot be before start date",
            issues=[f"end_date {end_date.isoformat()} is before start_date {start_date.isoformat()}"],
        )


def resolve_class_scope(class_scope: str, known_class_ids: Sequence[str]) -> list[str]:
    """Expand ``"all"`` into the known classes; a single id stays as is."""
    scope = class_scope.strip()
    if scope.lower() != ALL_CLASSES:
        return [scope]
    class_ids = list(dict.fromkeys(item.strip() for item in known_class_ids if item and item.strip()))
    if not class_ids:
        raise PlanValidationError(
            "No classes available for an all-classes plan",
            issues=["known_class_ids is empty"],
        )
    return class_ids


def generate_exam_sessions(
    start_date: date,
    end_date: date,
    exam_type: ExamType,
    class_id: str = ALL_CLASSES,
) -> list[ExamSession]:
    check_date_range(start_date, end_date)
    session_types = EXAM_SESSIONS_BY_TYPE[exam_type]
    sessions = [
        ExamSession(date=day, session=session_type, class_id=class_id)
        for day in expand_dates(start_date, end_date, skip_weekends=True)
        for session_type in session_types
    ]
    logger.info(
        "Generated %d %s exam session(s) for class %s between %s and %s",
        len(sessions),
        exam_type,
        class_id,
        start_date,
        end_date,
    )
    return sessions


def exam_session_issues(session: ExamSession) -> list[str]:
    """Problems that keep a session from being written onto a calendar day."""
    label = f"{session.date.isoformat()} {session.session}"
    if not session.is_complete:
        return [f"{label} has no subject code"]
    issues: list[str] = []
    try:
        ExamToken(subject_code=session.subject_code, session_type=session.session)
    except ValidationError as exc:
        reason = exc.errors()[0]["msg"]
        issues.append(f"{label} subject code {session.subject_code!r} cannot be stored: {reason}")
    if "_" in session.class_id:
        issues.append(f"{label} class id {session.class_id!r} cannot contain '_'")
    return issues


def validate_exam_sessions(sessions: Sequence[ExamSession]) -> None:
    if not sessions:
        raise PlanValidationError("Exam plan has no sessions", issues=["sessions is empty"])
    issues: list[str] = []
    incomplete: list[int] = []
    invalid: list[int] = []
    for index, session in enumerate(sessions):
        session_issues = exam_session_issues(session)
        if not session_issues:
            continue
        issues.extend(f"session {index}: {issue}" for issue in session_issues)
        if session.is_complete:
            invalid.append(index)
        else:
            incomplete.append(index)
    if issues:
        logger.warning(
            "Rejected exam plan with %d incomplete and %d invalid session(s)",
            len(incomplete),
            len(invalid),
        )
        raise PlanValidationError(
            "Every exam session needs a valid subject code before submission",
            issues=issues,
            details={"incomplete_indexes": incomplete, "invalid_indexes": invalid},
        )


def expand_sessions_for_classes(sessions: Sequence[ExamSession], known_class_ids: Sequence[str]) -> list[ExamSession]:
    expanded: list[ExamSession] = []
    for session in sessions:
        for class_id in resolve_class_scope(session.class_id, known_class_ids):
            expanded.append(session.model_copy(update={"class_id": class_id}))
    return expanded


def generate_holiday_plan(
    holiday_name: str,
    start_date: date,
    end_date: date | None = None,
    *,
    duration: HolidayDuration = "full_day",
    class_ids: Sequence[str],
) -> list[HolidayPlanEntry]:
    name = (holiday_name or "").strip()
    if not name:
        raise PlanValidationError("Holiday name is required", issues=["holiday_name is empty"])
    last_date = start_date if end_date is None else end_date
    check_date_range(start_date, last_date)
    if not class_ids:
        raise PlanValidationError("Holiday plan needs at least one class", issues=["class_ids is empty"])

    entries = [
        HolidayPlanEntry(
            date=day,
            day_name=DAY_NAMES[day.weekday()],
            duration=duration,
            class_id=class_id,
            holiday_name=name,
        )
        for day in expand_dates(start_date, last_date)
        for class_id in class_ids
    ]
    logger.info("Generated %d holiday entr(ies) for %r", len(entries), name)
    return entries


class DraftState(str, Enum):
    configuring = "configuring"
    sessions_drafted = "sessions_drafted"
    submitting = "submitting"
    done = "done"


class ExamScheduleDraft:
    """Authoring flow for an exam timetable.

    configure -> generate -> set subjects -> begin_submit -> complete.
    ``begin_submit`` is the only way out of the drafted state and it refuses
    while any session still lacks a subject code.
    """

    def __init__(self) -> None:
        self.state = DraftState.configuring
        self.start_date: date | None = None
        self.end_date: date | None = None
        self.exam_type: ExamType | None = None
        self.class_scope: str = ALL_CLASSES
        self.sessions: list[ExamSession] = []
        self.submission: list[ExamSession] = []

    def _require(self, action: str, *states: DraftState) -> None:
        if self.state not in states:
            raise DraftStateError(self.state.value, action)

    def configure(self, start_date: date, end_date: date, exam_type: ExamType, class_scope: str = ALL_CLASSES) -> None:
        self._require("configure", DraftState.configuring)
        check_date_range(start_date, end_date)
        self.start_date = start_date
        self.end_date = end_date
        self.exam_type = exam_type
        self.class_scope = class_scope

    def generate(self) -> list[ExamSession]:
        self._require("generate sessions", DraftState.configuring, DraftState.sessions_drafted)
        if self.start_date is None or self.end_date is None or self.exam_type is None:
            raise DraftStateError(self.state.value, "generate sessions before configuring")
        self.sessions = generate_exam_sessions(self.start_date, self.end_date, self.exam_type, self.class_scope)
        self.state = DraftState.sessions_drafted
        return list(self.sessions)

    def set_subject(self, index: int, subject_code: str) -> ExamSession:
        self._require("edit a session", DraftState.sessions_drafted)
        if not 0 <= index < len(self.sessions):
            raise IndexError(f"No exam session at index {index}")
        updated = self.sessions[index].model_copy(update={"subject_code": (subject_code or "").strip()})
        self.sessions[index] = updated
        return updated

    def begin_submit(self, known_class_ids: Sequence[str] = ()) -> list[ExamSession]:
        self._require("submit", DraftState.sessions_drafted)
        validate_exam_sessions(self.sessions)
        self.submission = expand_sessions_for_classes(self.sessions, known_class_ids)
        self.state = DraftState.submitting
        return list(self.submission)

    def complete(self) -> None:
        self._require("complete", DraftState.submitting)
        self.state = DraftState.done

    def fail(self) -> None:
        self._require("mark failed", DraftState.submitting)
        self.submission = []
        self.state = DraftState.sessions_drafted

    def reset(self) -> None:
        self.__init__()
