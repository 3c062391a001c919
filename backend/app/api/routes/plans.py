import logging

from fastapi import APIRouter, Depends

from app.api.deps import get_schedule_config, get_slot_codec
from app.schemas.plans import (
    ApplyExamRequest,
    ExamPlanRequest,
    ExamPlanResponse,
    ExamPlanValidateRequest,
    ExamPlanValidateResponse,
    HolidayPlanRequest,
    HolidayPlanResponse,
)
from app.schemas.schedule import CalendarDay, ScheduleConfig
from app.services.calendar_mutations import apply_exam_session
from app.services.session_plans import (
    expand_sessions_for_classes,
    generate_exam_sessions,
    generate_holiday_plan,
    resolve_class_scope,
    validate_exam_sessions,
)
from app.services.slot_codec import SlotCodec

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/plans/exams", response_model=ExamPlanResponse)
def create_exam_plan(payload: ExamPlanRequest) -> ExamPlanResponse:
    sessions = generate_exam_sessions(
        payload.start_date,
        payload.end_date,
        payload.exam_type,
        payload.class_id,
    )
    return ExamPlanResponse(exam_type=payload.exam_type, sessions=sessions)


@router.post("/plans/exams/validate", response_model=ExamPlanValidateResponse)
def validate_exam_plan(payload: ExamPlanValidateRequest) -> ExamPlanValidateResponse:
    validate_exam_sessions(payload.sessions)
    sessions = expand_sessions_for_classes(payload.sessions, payload.known_class_ids)
    if sessions != payload.sessions:
        validate_exam_sessions(sessions)
    return ExamPlanValidateResponse(valid=True, sessions=sessions)


@router.post("/plans/exams/apply", response_model=CalendarDay)
def apply_exam_plan_session(
    payload: ApplyExamRequest,
    config: ScheduleConfig = Depends(get_schedule_config),
    codec: SlotCodec = Depends(get_slot_codec),
) -> CalendarDay:
    return apply_exam_session(payload.session, payload.day, config, codec)


@router.post("/plans/holidays", response_model=HolidayPlanResponse)
def create_holiday_plan(payload: HolidayPlanRequest) -> HolidayPlanResponse:
    class_ids = resolve_class_scope(payload.class_id, payload.known_class_ids)
    entries = generate_holiday_plan(
        payload.holiday_name,
        payload.start_date,
        payload.end_date,
        duration=payload.duration,
        class_ids=class_ids,
    )
    logger.info("Prepared holiday plan %r for %d class(es)", payload.holiday_name, len(class_ids))
    return HolidayPlanResponse(entries=entries)
