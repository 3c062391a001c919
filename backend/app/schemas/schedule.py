from __future__ import annotations

import datetime as dt
import json
import re
from enum import Enum
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

DAY_NAMES = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")

TIME_PATTERN = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")
LONG_TIME_PATTERN = re.compile(r"^([01]\d|2[0-3]):[0-5]\d:[0-5]\d$")
LUNCH_BREAK_LABEL = "Lunch Break"


def parse_time_to_minutes(value: str) -> int:
    if not TIME_PATTERN.fullmatch(value):
        raise ValueError("Time must be in HH:MM 24-hour format")
    hours, minutes = value.split(":")
    return int(hours) * 60 + int(minutes)


def normalize_time(value: str) -> str:
    cleaned = value.strip()
    if LONG_TIME_PATTERN.fullmatch(cleaned):
        cleaned = cleaned[:5]
    if not TIME_PATTERN.fullmatch(cleaned):
        raise ValueError("Time must be in HH:MM 24-hour format")
    return cleaned


class DayType(str, Enum):
    normal = "normal"
    half_holiday = "half_holiday"
    full_holiday = "full_holiday"


DAY_TYPE_ALIASES = {
    "normal": DayType.normal,
    "halfholiday": DayType.half_holiday,
    "half_holiday": DayType.half_holiday,
    "fullholiday": DayType.full_holiday,
    "full_holiday": DayType.full_holiday,
    "holiday": DayType.full_holiday,
}


class PeriodSlot(BaseModel):
    model_config = ConfigDict(frozen=True)

    label: str = Field(min_length=1, max_length=50)
    start_time: str
    end_time: str
    is_lunch: bool = False

    @field_validator("start_time", "end_time", mode="before")
    @classmethod
    def validate_time(cls, value: str) -> str:
        return normalize_time(str(value))

    @model_validator(mode="after")
    def validate_time_order(self) -> "PeriodSlot":
        if parse_time_to_minutes(self.end_time) <= parse_time_to_minutes(self.start_time):
            raise ValueError("Period end time must be after start time")
        return self


DEFAULT_PERIOD_SLOTS: tuple[PeriodSlot, ...] = (
    PeriodSlot(label="Period 1", start_time="09:00", end_time="09:40"),
    PeriodSlot(label="Period 2", start_time="09:40", end_time="10:20"),
    PeriodSlot(label="Period 3", start_time="10:20", end_time="11:00"),
    PeriodSlot(label="Period 4", start_time="11:00", end_time="11:40"),
    PeriodSlot(label=LUNCH_BREAK_LABEL, start_time="11:40", end_time="12:20", is_lunch=True),
    PeriodSlot(label="Period 5", start_time="12:20", end_time="13:00"),
    PeriodSlot(label="Period 6", start_time="13:00", end_time="13:40"),
    PeriodSlot(label="Period 7", start_time="13:40", end_time="14:20"),
    PeriodSlot(label="Period 8", start_time="14:20", end_time="15:00"),
    PeriodSlot(label="Period 9", start_time="15:00", end_time="15:40"),
)

DEFAULT_SUBJECT_NAMES: dict[str, str] = {
    "MATH": "Mathematics",
    "SCI": "Science",
    "ENG": "English",
    "SOC": "Social Studies",
    "HIN": "Hindi",
    "TEL": "Telugu",
    "PHY": "Physics",
    "CHEM": "Chemistry",
    "BIO": "Biology",
    "COMP": "Computer Science",
    "ART": "Arts",
    "PE": "Physical Education",
    "8_MATH": "Mathematics",
    "8_SCI": "Science",
    "8_ENG": "English",
    "8_SOC": "Social Studies",
    "8_HIN": "Hindi",
    "8_TEL": "Telugu",
    "STUDY": "Study Period",
    "LUNCH": "Lunch Break",
}


class ScheduleConfig(BaseModel):
    """Static period table and display lookups handed to the grid composer."""

    model_config = ConfigDict(frozen=True)

    periods: tuple[PeriodSlot, ...] = DEFAULT_PERIOD_SLOTS
    lunch_start: str = "11:40"
    lunch_end: str = "12:20"
    subject_names: dict[str, str] = Field(default_factory=lambda: dict(DEFAULT_SUBJECT_NAMES))
    teacher_names: dict[str, str] = Field(default_factory=dict)

    @field_validator("lunch_start", "lunch_end", mode="before")
    @classmethod
    def validate_time(cls, value: str) -> str:
        return normalize_time(str(value))

    @model_validator(mode="after")
    def validate_lunch_window(self) -> "ScheduleConfig":
        if parse_time_to_minutes(self.lunch_end) <= parse_time_to_minutes(self.lunch_start):
            raise ValueError("Lunch end time must be after lunch start time")
        return self

    def subject_name(self, code: str) -> str:
        return self.subject_names.get(code, code)

    def teacher_name(self, teacher_id: str) -> str:
        return self.teacher_names.get(teacher_id, teacher_id)

    def period_half(self, period: PeriodSlot) -> Literal["morning", "lunch", "afternoon"]:
        if period.is_lunch or (period.start_time, period.end_time) == (self.lunch_start, self.lunch_end):
            return "lunch"
        if parse_time_to_minutes(period.end_time) <= parse_time_to_minutes(self.lunch_start):
            return "morning"
        return "afternoon"


def _coerce_slot_list(value) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        stripped = value.strip()
        if not stripped:
            return []
        try:
            value = json.loads(stripped)
        except json.JSONDecodeError:
            return [stripped]
        if not isinstance(value, list):
            return [str(value)]
    if not isinstance(value, (list, tuple)):
        return [str(value)]
    return [item if isinstance(item, str) else str(item) for item in value if item is not None]


class CalendarDay(BaseModel):
    date: dt.date
    day_of_week: int | None = Field(default=None, ge=1, le=7)
    day_name: str | None = None
    day_type: DayType = DayType.normal
    holiday_name: str | None = None
    morning_slots: list[str] = Field(default_factory=list)
    afternoon_slots: list[str] = Field(default_factory=list)

    @field_validator("morning_slots", "afternoon_slots", mode="before")
    @classmethod
    def coerce_slots(cls, value) -> list[str]:
        return _coerce_slot_list(value)

    @field_validator("day_type", mode="before")
    @classmethod
    def normalize_day_type(cls, value):
        if value is None:
            return DayType.normal
        if isinstance(value, str):
            key = value.strip().lower().replace(" ", "_").replace("-", "_")
            return DAY_TYPE_ALIASES.get(key, DAY_TYPE_ALIASES.get(key.replace("_", ""), value))
        return value

    @model_validator(mode="after")
    def fill_day_fields(self) -> "CalendarDay":
        if self.day_of_week is None:
            self.day_of_week = self.date.isoweekday()
        if not self.day_name:
            self.day_name = DAY_NAMES[self.date.weekday()]
        if self.day_type == DayType.normal:
            self.holiday_name = None
        return self


class WeekDay(BaseModel):
    date: dt.date
    day_of_week: int
    day_name: str


class WeekWindow(BaseModel):
    week_offset: int
    days: list[WeekDay]
    start_date: dt.date
    end_date: dt.date
    is_current_week: bool
    label: str


class HolidayCell(BaseModel):
    kind: Literal["holiday"] = "holiday"
    label: Literal["HOLIDAY", "HALF HOLIDAY"]
    holiday_name: str | None = None


class LunchCell(BaseModel):
    kind: Literal["lunch"] = "lunch"
    label: str = LUNCH_BREAK_LABEL


class ExamCell(BaseModel):
    kind: Literal["exam"] = "exam"
    subject_code: str
    subject_name: str
    session_type: str


class ClassCell(BaseModel):
    kind: Literal["class"] = "class"
    period_label: str
    subject_code: str
    subject_name: str
    teacher_id: str
    teacher_name: str


class EmptyCell(BaseModel):
    kind: Literal["empty"] = "empty"


CellContent = Annotated[
    Union[HolidayCell, LunchCell, ExamCell, ClassCell, EmptyCell],
    Field(discriminator="kind"),
]


class GridRow(BaseModel):
    date: dt.date
    day_of_week: int
    day_name: str
    day_type: DayType
    holiday_name: str | None = None
    cells: list[CellContent]


class WeeklyGrid(BaseModel):
    class_id: str | None = None
    academic_year: str | None = None
    week: WeekWindow
    periods: list[PeriodSlot]
    rows: list[GridRow]

    def cell(self, day_index: int, period_index: int) -> CellContent:
        return self.rows[day_index].cells[period_index]

    def teacher_load(self) -> dict[str, int]:
        load: dict[str, int] = {}
        for row in self.rows:
            for cell in row.cells:
                if isinstance(cell, ClassCell):
                    load[cell.teacher_id] = load.get(cell.teacher_id, 0) + 1
        return load


class WeekGridRequest(BaseModel):
    week_offset: int = 0
    reference_date: dt.date | None = None
    class_id: str | None = None
    academic_year: str | None = None
    days: list[CalendarDay] = Field(default_factory=list, max_length=14)
    periods: list[PeriodSlot] | None = Field(default=None, max_length=20)
