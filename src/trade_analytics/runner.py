from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Iterable

from trade_analytics.engine import STEPS, PerformanceReport, PerformanceRequest, assemble_report, prepare_window
from trade_analytics.errors import SupersededRequestError
from trade_analytics.models import Trade

logger = logging.getLogger(__name__)

STEP_WINDOW = "window"


@dataclass(frozen=True)
class ProgressEvent:
    generation: int
    step: str
    current: int
    total: int

    def to_dict(self) -> dict[str, Any]:
        return {"generation": self.generation, "step": self.step, "current": self.current, "total": self.total}


class PerformanceRunner:
    """Runs performance computations off the caller's path, newest request wins.

    Submitting a request cancels whatever computation is still in flight.
    A superseded run raises ``SupersededRequestError`` instead of returning
    its report, so stale results never reach the caller.
    """

    def __init__(self, progress: asyncio.Queue[ProgressEvent] | None = None) -> None:
        self._progress = progress
        self._generation = 0
        self._task: asyncio.Task[PerformanceReport] | None = None

    @property
    def generation(self) -> int:
        return self._generation

    def submit(self, trades: Iterable[Trade], request: PerformanceRequest) -> asyncio.Task[PerformanceReport]:
        self._generation += 1
        generation = self._generation
        if self._task is not None and not self._task.done():
            logger.debug("Cancelling performance request %d for %d", generation - 1, generation)
            self._task.cancel()
        # Snapshot the input so later caller mutations cannot leak into this run.
        snapshot = list(trades)
        self._task = asyncio.create_task(self._compute(generation, snapshot, request))
        return self._task

    async def run(self, trades: Iterable[Trade], request: PerformanceRequest) -> PerformanceReport:
        task = self.submit(trades, request)
        generation = self._generation
        return await self.wait(task, generation)

    async def wait(self, task: asyncio.Task[PerformanceReport], generation: int) -> PerformanceReport:
        try:
            report = await task
        except asyncio.CancelledError:
            if generation != self._generation:
                raise SupersededRequestError(generation, self._generation) from None
            raise
        if generation != self._generation:
            logger.debug("Discarding result of superseded request %d", generation)
            raise SupersededRequestError(generation, self._generation)
        return report

    def cancel(self) -> None:
        if self._task is not None and not self._task.done():
            self._task.cancel()

    async def _compute(
        self,
        generation: int,
        trades: list[Trade],
        request: PerformanceRequest,
    ) -> PerformanceReport:
        total = len(STEPS) + 1
        window = prepare_window(trades, request)
        self._emit(generation, STEP_WINDOW, 1, total)
        await asyncio.sleep(0)

        parts: dict[str, Any] = {}
        for index, (name, step) in enumerate(STEPS, start=2):
            parts.update(step(window, request))
            self._emit(generation, name, index, total)
            await asyncio.sleep(0)
        return assemble_report(window, request, parts)

    def _emit(self, generation: int, step: str, current: int, total: int) -> None:
        if self._progress is None:
            return
        try:
            self._progress.put_nowait(ProgressEvent(generation, step, current, total))
        except asyncio.QueueFull:
            logger.debug("Progress queue full; dropped %s event for request %d", step, generation)
