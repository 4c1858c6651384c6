from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Mapping
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from typing import Dict, Optional

from domain.models import ColumnSize, Event, LayoutSolution, Rect, SolveOutcome
from domain.ports.dispatch import ResultDispatcher
from domain.ports.layout import LayoutEngine

logger = logging.getLogger(__name__)

FrameResult = Optional[Dict[int, Rect]]
SolutionCallback = Callable[["FrameCalculation", FrameResult], None]


class FrameCalculation:
    """One background layout job for a day column.

    ``start`` runs the layout on a worker and hands the result to
    ``on_result`` through the dispatcher exactly once. ``None`` is delivered
    when the job was cancelled before it finished or the engine raised; in
    the latter case the returned future also carries the exception.
    """

    def __init__(
        self,
        column: ColumnSize,
        engine: LayoutEngine,
        dispatcher: ResultDispatcher,
        executor: Executor | None = None,
    ) -> None:
        self.column = column
        self.solution: LayoutSolution | None = None
        self._engine = engine
        self._dispatcher = dispatcher
        self._executor = executor
        self._cancel_event = threading.Event()
        self._lock = threading.Lock()
        self._started = False
        self._delivered = False

    @property
    def is_cancelled(self) -> bool:
        return self._cancel_event.is_set()

    @property
    def is_calculating(self) -> bool:
        with self._lock:
            running = self._started and not self._delivered
        return running and not self.is_cancelled

    def start(self, events: Mapping[int, Event], on_result: SolutionCallback) -> Future[FrameResult]:
        with self._lock:
            if self._started:
                msg = "Frame calculation already started"
                raise RuntimeError(msg)
            self._started = True

        snapshot = dict(events)
        if self._executor is not None:
            return self._executor.submit(self._run, snapshot, on_result)

        executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="frame-calculation")
        try:
            return executor.submit(self._run, snapshot, on_result)
        finally:
            executor.shutdown(wait=False)

    def cancel(self) -> None:
        self._cancel_event.set()

    def _run(self, events: Dict[int, Event], on_result: SolutionCallback) -> FrameResult:
        try:
            solution = self._engine.layout(events, self.column, self._cancel_event)
        except Exception:
            logger.exception("Frame calculation failed for %d events", len(events))
            self.solution = None
            self._dispatcher.dispatch(lambda: self._deliver(on_result, None))
            raise
        if self._cancel_event.is_set():
            solution = LayoutSolution(outcome=SolveOutcome.CANCELLED)
        self.solution = solution
        result = solution.as_result()
        self._dispatcher.dispatch(lambda: self._deliver(on_result, result))
        return result

    def _deliver(self, on_result: SolutionCallback, result: FrameResult) -> None:
        with self._lock:
            if self._delivered:
                return
            self._delivered = True
        on_result(self, result)
