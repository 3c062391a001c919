from functools import lru_cache

from fastapi import Depends
from pydantic import ValidationError

from app.core.config import Settings, get_settings
from app.core.exceptions import ConfigurationError
from app.schemas.schedule import ScheduleConfig
from app.services.slot_codec import SlotCodec
from app.services.weekly_grid import WeeklyGridComposer


def build_schedule_config(settings: Settings) -> ScheduleConfig:
    try:
        return ScheduleConfig(lunch_start=settings.lunch_start_time, lunch_end=settings.lunch_end_time)
    except ValidationError as exc:
        raise ConfigurationError(f"Invalid lunch window in settings: {exc.errors()[0]['msg']}") from exc


@lru_cache
def _cached_schedule_config() -> ScheduleConfig:
    return build_schedule_config(get_settings())


def get_schedule_config() -> ScheduleConfig:
    return _cached_schedule_config()


def get_slot_codec(config: ScheduleConfig = Depends(get_schedule_config)) -> SlotCodec:
    return SlotCodec.from_config(config)


def get_grid_composer(
    config: ScheduleConfig = Depends(get_schedule_config),
    codec: SlotCodec = Depends(get_slot_codec),
) -> WeeklyGridComposer:
    return WeeklyGridComposer(config, codec)
