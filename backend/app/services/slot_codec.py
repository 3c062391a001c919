from __future__ import annotations

import logging
import re

from pydantic import ValidationError

from app.schemas.schedule import TIME_PATTERN, ScheduleConfig, normalize_time
from app.schemas.slots import (
    EXAM_PREFIX,
    LUNCH_MARKER,
    ExamToken,
    LunchToken,
    RegularToken,
    SlotToken,
    UnrecognizedToken,
    find_session_type,
)

logger = logging.getLogger(__name__)

COMPACT_TIME_PATTERN = re.compile(r"^[0-9]{4}$")
DAY_NUMBER_PATTERN = re.compile(r"^[0-9]{1,2}$")
PERIOD_MARKER_PATTERN = re.compile(r"^(P[0-9]+|LUNCH)$")
REGULAR_MIN_FIELDS = 7
TAGGED_LUNCH_FIELDS = 7
EXAM_MIN_FIELDS = 3


def compact_to_time(value: str) -> str | None:
    """Turn ``HHMM`` into ``HH:MM``; ``None`` when the field is not a clock time."""
    if not COMPACT_TIME_PATTERN.fullmatch(value):
        return None
    formatted = f"{value[:2]}:{value[2:]}"
    if not TIME_PATTERN.fullmatch(formatted):
        return None
    return formatted


def time_to_compact(value: str) -> str:
    return normalize_time(value).replace(":", "")


class SlotCodec:
    """Decodes the underscore-delimited slot strings stored on calendar days.

    Decoding is total: anything that does not match a known shape comes back as
    an ``UnrecognizedToken`` carrying the raw text.
    """

    def __init__(self, lunch_start: str = "11:40", lunch_end: str = "12:20") -> None:
        self.lunch_start = normalize_time(lunch_start)
        self.lunch_end = normalize_time(lunch_end)
        self._lunch_start_compact = time_to_compact(self.lunch_start)
        self._lunch_end_compact = time_to_compact(self.lunch_end)

    @classmethod
    def from_config(cls, config: ScheduleConfig) -> "SlotCodec":
        return cls(lunch_start=config.lunch_start, lunch_end=config.lunch_end)

    def decode(self, token: str) -> SlotToken:
        if not isinstance(token, str):
            token = "" if token is None else str(token)
        try:
            decoded = self._decode(token)
        except ValidationError:
            decoded = None
        if decoded is None:
            logger.debug("Unrecognized slot token %r", token)
            return UnrecognizedToken(raw=token)
        return decoded

    def decode_many(self, tokens: list[str]) -> list[SlotToken]:
        return [self.decode(token) for token in tokens]

    def _decode(self, token: str) -> SlotToken | None:
        if LUNCH_MARKER in token:
            return self._decode_lunch(token)
        if token.startswith(EXAM_PREFIX):
            return self._decode_exam(token)
        return self._decode_regular(token)

    def _decode_lunch(self, token: str) -> LunchToken | None:
        parts = token.split("_")
        if len(parts) == 3 and parts[0] == LUNCH_MARKER and parts[2] == LUNCH_MARKER and parts[1]:
            return LunchToken(start_time=self.lunch_start, end_time=self.lunch_end)
        if (
            len(parts) == TAGGED_LUNCH_FIELDS
            and PERIOD_MARKER_PATTERN.fullmatch(parts[2])
            and parts[3] == self._lunch_start_compact
            and parts[4] == self._lunch_end_compact
        ):
            return LunchToken(start_time=compact_to_time(parts[3]), end_time=compact_to_time(parts[4]))
        return None

    def _decode_exam(self, token: str) -> ExamToken | None:
        parts = token.split("_")
        if len(parts) < EXAM_MIN_FIELDS:
            return None
        # Grade-prefixed subjects span several fields; the session marker closes them.
        marker = find_session_type(parts, start=2)
        if marker is None:
            return None
        index, session_type = marker
        return ExamToken(subject_code="_".join(parts[1:index]), session_type=session_type)

    def _decode_regular(self, token: str) -> RegularToken | None:
        parts = token.split("_")
        if len(parts) < REGULAR_MIN_FIELDS:
            return None
        class_id, day, period_label, start_raw, end_raw, teacher_id = parts[:6]
        if not DAY_NUMBER_PATTERN.fullmatch(day):
            return None
        start_time = compact_to_time(start_raw)
        end_time = compact_to_time(end_raw)
        if start_time is None or end_time is None:
            return None
        return RegularToken(
            class_id=class_id,
            day_of_week=int(day),
            period_label=period_label,
            start_time=start_time,
            end_time=end_time,
            teacher_id=teacher_id,
            subject_code="_".join(parts[6:]),
        )

    def encode(self, token: SlotToken, *, class_id: str = "ALL") -> str:
        """Inverse of :meth:`decode`.

        Lunch tokens only carry a time window, so they are written in the bare
        ``LUNCH_<class_id>_LUNCH`` shape, which is only valid for the configured
        lunch window.
        """
        if isinstance(token, RegularToken):
            return "_".join(
                [
                    token.class_id,
                    str(token.day_of_week),
                    token.period_label,
                    time_to_compact(token.start_time),
                    time_to_compact(token.end_time),
                    token.teacher_id,
                    token.subject_code,
                ]
            )
        if isinstance(token, LunchToken):
            if (token.start_time, token.end_time) != (self.lunch_start, self.lunch_end):
                raise ValueError(
                    f"Lunch window {token.start_time}-{token.end_time} differs from the configured "
                    f"{self.lunch_start}-{self.lunch_end} window"
                )
            if not class_id or "_" in class_id:
                raise ValueError("class_id must be non-empty and cannot contain '_'")
            return f"{LUNCH_MARKER}_{class_id}_{LUNCH_MARKER}"
        if isinstance(token, ExamToken):
            return f"{EXAM_PREFIX}{token.subject_code}_{token.session_type}"
        if isinstance(token, UnrecognizedToken):
            return token.raw
        raise TypeError(f"Unsupported slot token type: {type(token).__name__}")

    def exam_token(self, subject_code: str, session_type: str) -> str:
        return self.encode(ExamToken(subject_code=subject_code, session_type=session_type))

    def lunch_token(self, class_id: str) -> str:
        return self.encode(LunchToken(start_time=self.lunch_start, end_time=self.lunch_end), class_id=class_id)

    def is_lunch(self, token: str) -> bool:
        return isinstance(self.decode(token), LunchToken)
