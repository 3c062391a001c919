from __future__ import annotations

import datetime as dt
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.schemas.schedule import CalendarDay
from app.schemas.slots import SessionType

ALL_CLASSES = "all"

ExamType = Literal["one_per_day", "two_per_day"]
HolidayDuration = Literal["full_day", "half_day"]

EXAM_TYPE_ALIASES = {
    "1_per_day": "one_per_day",
    "2_per_day": "two_per_day",
}


class ExamSession(BaseModel):
    model_config = ConfigDict(frozen=True)

    date: dt.date
    session: SessionType
    class_id: str = Field(min_length=1, max_length=50)
    subject_code: str = ""

    @field_validator("subject_code", mode="before")
    @classmethod
    def strip_subject(cls, value: str | None) -> str:
        return (value or "").strip()

    @property
    def is_complete(self) -> bool:
        return bool(self.subject_code)


class HolidayPlanEntry(BaseModel):
    model_config = ConfigDict(frozen=True)

    date: dt.date
    day_name: str
    duration: HolidayDuration
    class_id: str
    holiday_name: str


class ExamPlanRequest(BaseModel):
    start_date: dt.date
    end_date: dt.date
    exam_type: ExamType
    class_id: str = Field(default=ALL_CLASSES, min_length=1, max_length=50)

    @field_validator("exam_type", mode="before")
    @classmethod
    def normalize_exam_type(cls, value: str) -> str:
        if isinstance(value, str):
            cleaned = value.strip().lower()
            return EXAM_TYPE_ALIASES.get(cleaned, cleaned)
        return value


class ExamPlanResponse(BaseModel):
    exam_type: ExamType
    sessions: list[ExamSession]


class ExamPlanValidateRequest(BaseModel):
    sessions: list[ExamSession] = Field(default_factory=list, max_length=500)
    known_class_ids: list[str] = Field(default_factory=list, max_length=200)


class ExamPlanValidateResponse(BaseModel):
    valid: bool
    sessions: list[ExamSession]


class HolidayPlanRequest(BaseModel):
    holiday_name: str = Field(min_length=1, max_length=200)
    start_date: dt.date
    end_date: dt.date | None = None
    duration: HolidayDuration = "full_day"
    class_id: str = Field(default=ALL_CLASSES, min_length=1, max_length=50)
    known_class_ids: list[str] = Field(default_factory=list, max_length=200)

    @field_validator("holiday_name")
    @classmethod
    def normalize_name(cls, value: str) -> str:
        trimmed = value.strip()
        if not trimmed:
            raise ValueError("Holiday name cannot be empty")
        return trimmed


class HolidayPlanResponse(BaseModel):
    entries: list[HolidayPlanEntry]


class ApplyExamRequest(BaseModel):
    session: ExamSession
    day: CalendarDay | None = None
