from datetime import date

import pytest

from app.core.exceptions import AppError, DraftStateError, PlanValidationError
from app.schemas.plans import ExamPlanRequest, ExamSession
from app.services.session_plans import (
    DraftState,
    ExamScheduleDraft,
    expand_dates,
    expand_sessions_for_classes,
    generate_exam_sessions,
    generate_holiday_plan,
    resolve_class_scope,
    validate_exam_sessions,
)


def test_two_per_day_exam_sessions():
    sessions = generate_exam_sessions(date(2025, 3, 3), date(2025, 3, 4), "two_per_day", "242508001")
    assert [(s.date, s.session) for s in sessions] == [
        (date(2025, 3, 3), "morning"),
        (date(2025, 3, 3), "afternoon"),
        (date(2025, 3, 4), "morning"),
        (date(2025, 3, 4), "afternoon"),
    ]
    assert all(s.subject_code == "" and s.class_id == "242508001" for s in sessions)


def test_one_per_day_exam_sessions_skip_weekends():
    sessions = generate_exam_sessions(date(2025, 3, 6), date(2025, 3, 11), "one_per_day")
    assert [s.date for s in sessions] == [date(2025, 3, 6), date(2025, 3, 7), date(2025, 3, 10), date(2025, 3, 11)]
    assert {s.session for s in sessions} == {"full_day"}
    assert all(s.date.weekday() < 5 for s in sessions)


def test_exam_range_of_only_weekend_is_empty():
    assert generate_exam_sessions(date(2025, 3, 8), date(2025, 3, 9), "two_per_day") == []


def test_exam_range_end_before_start_is_rejected():
    with pytest.raises(PlanValidationError):
        generate_exam_sessions(date(2025, 3, 5), date(2025, 3, 4), "one_per_day")


def test_exam_type_aliases():
    request = ExamPlanRequest(start_date=date(2025, 3, 3), end_date=date(2025, 3, 3), exam_type="2_per_day")
    assert request.exam_type == "two_per_day"


def test_validation_gate_requires_every_subject():
    sessions = generate_exam_sessions(date(2025, 3, 3), date(2025, 3, 3), "two_per_day", "9A")
    filled = [sessions[0].model_copy(update={"subject_code": "MATH"}), sessions[1]]
    with pytest.raises(PlanValidationError) as exc_info:
        validate_exam_sessions(filled)
    error = exc_info.value
    assert isinstance(error, AppError)
    assert error.status_code == 422
    assert error.details["incomplete_indexes"] == [1]
    assert len(error.issues) == 1

    validate_exam_sessions([s.model_copy(update={"subject_code": "ENG"}) for s in sessions])


def test_validation_gate_rejects_sessions_that_cannot_be_stored():
    base = ExamSession(date=date(2025, 3, 3), session="morning", class_id="9A", subject_code="MATH")
    sessions = [
        base,
        base.model_copy(update={"subject_code": "SCI_morning"}),
        base.model_copy(update={"class_id": "9_A"}),
        base.model_copy(update={"subject_code": ""}),
    ]
    with pytest.raises(PlanValidationError) as exc_info:
        validate_exam_sessions(sessions)
    error = exc_info.value
    assert error.details["invalid_indexes"] == [1, 2]
    assert error.details["incomplete_indexes"] == [3]
    assert len(error.issues) == 3


def test_validation_rejects_empty_plan():
    with pytest.raises(PlanValidationError):
        validate_exam_sessions([])


def test_holiday_plan_is_inclusive():
    entries = generate_holiday_plan("Sankranti", date(2025, 1, 1), date(2025, 1, 3), class_ids=["9A"])
    assert [e.date for e in entries] == [date(2025, 1, 1), date(2025, 1, 2), date(2025, 1, 3)]
    assert {e.holiday_name for e in entries} == {"Sankranti"}
    assert {e.duration for e in entries} == {"full_day"}


def test_holiday_plan_defaults_to_single_day_and_keeps_weekends():
    single = generate_holiday_plan("Founders Day", date(2025, 3, 8), class_ids=["9A"], duration="half_day")
    assert len(single) == 1
    assert single[0].day_name == "Saturday"
    assert single[0].duration == "half_day"

    weekend = generate_holiday_plan("Break", date(2025, 3, 7), date(2025, 3, 10), class_ids=["9A"])
    assert [e.day_name for e in weekend] == ["Friday", "Saturday", "Sunday", "Monday"]


def test_holiday_plan_one_entry_per_date_per_class():
    entries = generate_holiday_plan("Diwali", date(2025, 10, 20), date(2025, 10, 21), class_ids=["1", "2", "3"])
    assert len(entries) == 6
    assert [(e.date.day, e.class_id) for e in entries[:3]] == [(20, "1"), (20, "2"), (20, "3")]


def test_holiday_plan_validation():
    with pytest.raises(PlanValidationError):
        generate_holiday_plan("Holi", date(2025, 3, 14), date(2025, 3, 13), class_ids=["9A"])
    with pytest.raises(PlanValidationError):
        generate_holiday_plan("   ", date(2025, 3, 14), class_ids=["9A"])
    with pytest.raises(PlanValidationError):
        generate_holiday_plan("Holi", date(2025, 3, 14), class_ids=[])


def test_resolve_class_scope():
    assert resolve_class_scope("9A", ["1", "2"]) == ["9A"]
    assert resolve_class_scope("all", ["1", "2", "1", " "]) == ["1", "2"]
    assert resolve_class_scope("ALL", ["3"]) == ["3"]
    with pytest.raises(PlanValidationError):
        resolve_class_scope("all", [])


def test_expand_sessions_for_all_classes():
    session = ExamSession(date=date(2025, 3, 3), session="full_day", class_id="all", subject_code="MATH")
    expanded = expand_sessions_for_classes([session], ["1", "2"])
    assert [s.class_id for s in expanded] == ["1", "2"]
    assert session.class_id == "all"


def test_expand_dates():
    assert expand_dates(date(2025, 3, 7), date(2025, 3, 10), skip_weekends=True) == [date(2025, 3, 7), date(2025, 3, 10)]
    assert expand_dates(date(2025, 3, 7), date(2025, 3, 6)) == []


def test_exam_draft_happy_path():
    draft = ExamScheduleDraft()
    assert draft.state == DraftState.configuring
    draft.configure(date(2025, 3, 3), date(2025, 3, 4), "one_per_day", "all")
    sessions = draft.generate()
    assert draft.state == DraftState.sessions_drafted
    assert len(sessions) == 2

    draft.set_subject(0, " MATH ")
    with pytest.raises(PlanValidationError):
        draft.begin_submit(["1", "2"])
    assert draft.state == DraftState.sessions_drafted

    draft.set_subject(1, "SCI")
    submission = draft.begin_submit(["1", "2"])
    assert draft.state == DraftState.submitting
    assert [(s.class_id, s.subject_code) for s in submission] == [
        ("1", "MATH"),
        ("2", "MATH"),
        ("1", "SCI"),
        ("2", "SCI"),
    ]
    draft.complete()
    assert draft.state == DraftState.done


def test_exam_draft_rejects_illegal_transitions():
    draft = ExamScheduleDraft()
    with pytest.raises(DraftStateError):
        draft.set_subject(0, "MATH")
    with pytest.raises(DraftStateError):
        draft.generate()
    with pytest.raises(DraftStateError):
        draft.complete()

    draft.configure(date(2025, 3, 3), date(2025, 3, 3), "two_per_day", "9A")
    draft.generate()
    draft.set_subject(0, "MATH")
    draft.set_subject(1, "ENG")
    draft.begin_submit()
    with pytest.raises(DraftStateError) as exc_info:
        draft.set_subject(0, "SCI")
    assert exc_info.value.status_code == 409

    draft.fail()
    assert draft.state == DraftState.sessions_drafted
    assert draft.submission == []

    draft.reset()
    assert draft.state == DraftState.configuring
    assert draft.sessions == []
