from __future__ import annotations

import re
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from app.schemas.schedule import TIME_PATTERN

LUNCH_MARKER = "LUNCH"
EXAM_PREFIX = "EXAM_"

SessionType = Literal["morning", "afternoon", "full_day"]

SEGMENT_PATTERN = re.compile(r"[^_]+")


def find_session_type(parts: list[str], start: int = 0) -> tuple[int, str] | None:
    """Locate the first session marker in split token fields.

    Returns the field index where the marker begins and the session type.
    ``full_day`` spans two fields once the token has been split on ``_``.
    """
    for index in range(start, len(parts)):
        if parts[index] in ("morning", "afternoon"):
            return index, parts[index]
        if parts[index] == "full" and index + 1 < len(parts) and parts[index + 1] == "day":
            return index, "full_day"
    return None


def _check_segment(value: str, field_name: str) -> str:
    if not SEGMENT_PATTERN.fullmatch(value):
        raise ValueError(f"{field_name} must be non-empty and cannot contain '_'")
    if LUNCH_MARKER in value:
        raise ValueError(f"{field_name} cannot contain the {LUNCH_MARKER} marker")
    return value


class RegularToken(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["regular"] = "regular"
    class_id: str
    day_of_week: int = Field(ge=0, le=7)
    period_label: str
    start_time: str
    end_time: str
    teacher_id: str
    subject_code: str = Field(min_length=1)

    @field_validator("class_id", "period_label", "teacher_id")
    @classmethod
    def validate_segment(cls, value: str, info) -> str:
        return _check_segment(value, info.field_name)

    @field_validator("start_time", "end_time")
    @classmethod
    def validate_time(cls, value: str) -> str:
        if not TIME_PATTERN.fullmatch(value):
            raise ValueError("Time must be in HH:MM 24-hour format")
        return value

    @field_validator("subject_code")
    @classmethod
    def validate_subject(cls, value: str) -> str:
        if LUNCH_MARKER in value:
            raise ValueError(f"subject_code cannot contain the {LUNCH_MARKER} marker")
        return value

    @model_validator(mode="after")
    def validate_not_exam(self) -> "RegularToken":
        if f"{self.class_id}_".startswith(EXAM_PREFIX):
            raise ValueError("class_id cannot be the EXAM prefix")
        return self


class LunchToken(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["lunch"] = "lunch"
    start_time: str
    end_time: str

    @field_validator("start_time", "end_time")
    @classmethod
    def validate_time(cls, value: str) -> str:
        if not TIME_PATTERN.fullmatch(value):
            raise ValueError("Time must be in HH:MM 24-hour format")
        return value


class ExamToken(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["exam"] = "exam"
    subject_code: str = Field(min_length=1)
    session_type: SessionType

    @field_validator("subject_code")
    @classmethod
    def validate_subject(cls, value: str) -> str:
        parts = value.split("_")
        if any(not part for part in parts):
            raise ValueError("subject_code cannot contain empty '_' segments")
        if find_session_type(parts) is not None:
            raise ValueError("subject_code cannot contain a session type segment")
        if LUNCH_MARKER in value:
            raise ValueError(f"subject_code cannot contain the {LUNCH_MARKER} marker")
        return value


class UnrecognizedToken(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["unrecognized"] = "unrecognized"
    raw: str


SlotToken = Annotated[
    Union[RegularToken, LunchToken, ExamToken, UnrecognizedToken],
    Field(discriminator="kind"),
]


class DecodeRequest(BaseModel):
    tokens: list[str] = Field(default_factory=list, max_length=500)


class DecodeResponse(BaseModel):
    tokens: list[SlotToken]


class EncodeRequest(BaseModel):
    tokens: list[SlotToken] = Field(default_factory=list, max_length=500)
    class_id: str = "ALL"


class EncodeResponse(BaseModel):
    tokens: list[str]
