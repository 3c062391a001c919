from __future__ import annotations

import logging
from collections.abc import Sequence
from datetime import date

from app.schemas.schedule import (
    CalendarDay,
    CellContent,
    ClassCell,
    DayType,
    EmptyCell,
    ExamCell,
    GridRow,
    HolidayCell,
    LunchCell,
    PeriodSlot,
    ScheduleConfig,
    WeeklyGrid,
    WeekWindow,
)
from app.schemas.slots import ExamToken, LunchToken, RegularToken, SlotToken
from app.services.slot_codec import SlotCodec

logger = logging.getLogger(__name__)

FULL_HOLIDAY_LABEL = "HOLIDAY"
HALF_HOLIDAY_LABEL = "HALF HOLIDAY"

EXAM_SESSION_HALVES = {
    "morning": {"morning"},
    "afternoon": {"afternoon"},
    "full_day": {"morning", "afternoon"},
}


class WeeklyGridComposer:
    """Overlays holidays, lunch, exams and class periods onto a day x period grid.

    Composition never raises on bad calendar data: undecodable tokens and
    missing days simply leave empty cells behind.
    """

    def __init__(self, config: ScheduleConfig, codec: SlotCodec | None = None) -> None:
        self.config = config
        self.codec = codec or SlotCodec.from_config(config)

    def compose(
        self,
        window: WeekWindow,
        days: Sequence[CalendarDay],
        *,
        periods: Sequence[PeriodSlot] | None = None,
        class_id: str | None = None,
        academic_year: str | None = None,
    ) -> WeeklyGrid:
        columns = list(periods) if periods is not None else list(self.config.periods)
        days_by_date = self._index_days(window, days)

        rows: list[GridRow] = []
        for week_day in window.days:
            day = days_by_date.get(week_day.date)
            if day is None:
                rows.append(
                    GridRow(
                        date=week_day.date,
                        day_of_week=week_day.day_of_week,
                        day_name=week_day.day_name,
                        day_type=DayType.normal,
                        cells=[EmptyCell() for _ in columns],
                    )
                )
                continue
            rows.append(
                GridRow(
                    date=week_day.date,
                    day_of_week=week_day.day_of_week,
                    day_name=week_day.day_name,
                    day_type=day.day_type,
                    holiday_name=day.holiday_name,
                    cells=self.compose_day(day, columns),
                )
            )

        return WeeklyGrid(
            class_id=class_id,
            academic_year=academic_year,
            week=window,
            periods=columns,
            rows=rows,
        )

    def compose_day(self, day: CalendarDay, columns: Sequence[PeriodSlot]) -> list[CellContent]:
        if day.day_type == DayType.full_holiday:
            return [HolidayCell(label=FULL_HOLIDAY_LABEL, holiday_name=day.holiday_name) for _ in columns]

        decoded = [self.codec.decode(token) for token in [*day.morning_slots, *day.afternoon_slots]]
        cells: list[CellContent] = []
        for period in columns:
            cell = self._match_cell(period, decoded)
            if cell is None:
                if day.day_type == DayType.half_holiday:
                    cell = HolidayCell(label=HALF_HOLIDAY_LABEL, holiday_name=day.holiday_name)
                else:
                    cell = EmptyCell()
            cells.append(cell)
        return cells

    def _match_cell(self, period: PeriodSlot, decoded: Sequence[SlotToken]) -> CellContent | None:
        half = self.config.period_half(period)
        exam: ExamToken | None = None
        regular: RegularToken | None = None

        for token in decoded:
            if isinstance(token, LunchToken):
                if (token.start_time, token.end_time) == (period.start_time, period.end_time):
                    return LunchCell(label=period.label)
            elif isinstance(token, ExamToken):
                if exam is None and half in EXAM_SESSION_HALVES[token.session_type]:
                    exam = token
            elif isinstance(token, RegularToken):
                if regular is None and (token.start_time, token.end_time) == (period.start_time, period.end_time):
                    regular = token

        if exam is not None:
            return ExamCell(
                subject_code=exam.subject_code,
                subject_name=self.config.subject_name(exam.subject_code),
                session_type=exam.session_type,
            )
        if regular is not None:
            return ClassCell(
                period_label=regular.period_label,
                subject_code=regular.subject_code,
                subject_name=self.config.subject_name(regular.subject_code),
                teacher_id=regular.teacher_id,
                teacher_name=self.config.teacher_name(regular.teacher_id),
            )
        return None

    def _index_days(self, window: WeekWindow, days: Sequence[CalendarDay]) -> dict[date, CalendarDay]:
        wanted = {week_day.date for week_day in window.days}
        indexed: dict[date, CalendarDay] = {}
        for day in days:
            if day.date not in wanted:
                logger.debug("Ignoring calendar day %s outside week %s..%s", day.date, window.start_date, window.end_date)
                continue
            if day.date in indexed:
                logger.debug("Ignoring duplicate calendar day %s", day.date)
                continue
            indexed[day.date] = day
        return indexed
