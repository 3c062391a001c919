from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Sequence
from datetime import date

from app.schemas.schedule import CalendarDay, WeeklyGrid, WeekWindow
from app.services.week_window import resolve_week
from app.services.weekly_grid import WeeklyGridComposer

logger = logging.getLogger(__name__)

FetchDays = Callable[[WeekWindow], Awaitable[Sequence[CalendarDay]]]


class LatestWeekLoader:
    """Fetches and composes week grids, keeping only the newest request.

    Every ``request`` cancels the fetch of the one before it; a request that
    has been overtaken returns ``None`` instead of a grid.
    """

    def __init__(
        self,
        fetch_days: FetchDays,
        composer: WeeklyGridComposer,
        today: Callable[[], date],
        *,
        class_id: str | None = None,
        academic_year: str | None = None,
    ) -> None:
        self._fetch_days = fetch_days
        self._composer = composer
        self._today = today
        self._class_id = class_id
        self._academic_year = academic_year
        self._generation = 0
        self._inflight: asyncio.Task | None = None
        self.latest: WeeklyGrid | None = None

    async def request(self, week_offset: int) -> WeeklyGrid | None:
        self._generation += 1
        generation = self._generation
        if self._inflight is not None and not self._inflight.done():
            self._inflight.cancel()

        window = resolve_week(self._today(), week_offset)
        task = asyncio.ensure_future(self._fetch_days(window))
        self._inflight = task
        try:
            days = await task
        except asyncio.CancelledError:
            if generation != self._generation:
                logger.debug("Week offset %d superseded while fetching", week_offset)
                return None
            raise

        if generation != self._generation:
            logger.debug("Discarding stale calendar data for week offset %d", week_offset)
            return None

        grid = self._composer.compose(
            window,
            list(days),
            class_id=self._class_id,
            academic_year=self._academic_year,
        )
        self.latest = grid
        return grid
