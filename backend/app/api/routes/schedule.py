import logging
from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query, status

from app.api.deps import get_grid_composer, get_slot_codec
from app.core.config import get_settings
from app.schemas.schedule import WeekGridRequest, WeeklyGrid, WeekWindow
from app.schemas.slots import DecodeRequest, DecodeResponse, EncodeRequest, EncodeResponse
from app.services.slot_codec import SlotCodec
from app.services.week_window import reference_date_in, resolve_week
from app.services.weekly_grid import WeeklyGridComposer

logger = logging.getLogger(__name__)

router = APIRouter()
settings = get_settings()


def _reference_date(value: date | None) -> date:
    if value is not None:
        return value
    return reference_date_in(settings.school_timezone)


@router.post("/slots/decode", response_model=DecodeResponse)
def decode_slots(
    payload: DecodeRequest,
    codec: SlotCodec = Depends(get_slot_codec),
) -> DecodeResponse:
    return DecodeResponse(tokens=codec.decode_many(payload.tokens))


@router.post("/slots/encode", response_model=EncodeResponse)
def encode_slots(
    payload: EncodeRequest,
    codec: SlotCodec = Depends(get_slot_codec),
) -> EncodeResponse:
    try:
        tokens = [codec.encode(token, class_id=payload.class_id) for token in payload.tokens]
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc)) from exc
    return EncodeResponse(tokens=tokens)


@router.get("/week", response_model=WeekWindow)
def get_week_window(
    offset: int = Query(default=0, ge=-520, le=520),
    reference_date: date | None = None,
) -> WeekWindow:
    return resolve_week(_reference_date(reference_date), offset)


@router.post("/week-grid", response_model=WeeklyGrid)
def compose_week_grid(
    payload: WeekGridRequest,
    composer: WeeklyGridComposer = Depends(get_grid_composer),
) -> WeeklyGrid:
    window = resolve_week(_reference_date(payload.reference_date), payload.week_offset)
    grid = composer.compose(
        window,
        payload.days,
        periods=payload.periods,
        class_id=payload.class_id,
        academic_year=payload.academic_year or settings.default_academic_year,
    )
    logger.debug(
        "Composed week grid for class %s (%s..%s) from %d calendar day(s)",
        payload.class_id,
        window.start_date,
        window.end_date,
        len(payload.days),
    )
    return grid
