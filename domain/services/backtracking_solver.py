from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable, Sequence
from typing import List

from domain.models import Frame, LayoutSolution, Placement, SolveOutcome
from domain.services.placement_domain import order_domain
from domain.services.sweep_collisions import SweepResult

logger = logging.getLogger(__name__)

DEFAULT_TIME_BUDGET_SECONDS = 15.0


class BacktrackingSolver:
    """Depth-first assignment of one placement per frame.

    Variables are the frames in sweep order; only pairs flagged in the
    collision matrix are checked. Candidates are written into the frames in
    place, and a depth whose candidates are all rejected puts its frame back
    the way it found it before the search moves up.
    """

    def __init__(
        self,
        frames: Sequence[Frame],
        domains: Sequence[Sequence[Placement]],
        collisions: Sequence[Sequence[bool]],
        *,
        time_budget_seconds: float = DEFAULT_TIME_BUDGET_SECONDS,
        cancel_event: threading.Event | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if not (len(frames) == len(domains) == len(collisions)):
            msg = "frames, domains and collisions must have the same length"
            raise ValueError(msg)
        self.frames: List[Frame] = list(frames)
        self.domains: List[List[Placement]] = [order_domain(list(domain)) for domain in domains]
        self.collisions = collisions
        self.time_budget_seconds = time_budget_seconds
        self._cancel_event = cancel_event or threading.Event()
        self._clock = clock
        self._started_at = clock()
        self._timed_out = False

    @classmethod
    def from_sweep(
        cls,
        sweep: SweepResult,
        *,
        time_budget_seconds: float = DEFAULT_TIME_BUDGET_SECONDS,
        cancel_event: threading.Event | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> BacktrackingSolver:
        return cls(
            sweep.frames,
            sweep.domains,
            sweep.collisions,
            time_budget_seconds=time_budget_seconds,
            cancel_event=cancel_event,
            clock=clock,
        )

    @property
    def cancelled(self) -> bool:
        return self._cancel_event.is_set()

    @property
    def timed_out(self) -> bool:
        return self._timed_out

    def cancel(self) -> None:
        self._cancel_event.set()

    def solve(self) -> LayoutSolution:
        logger.debug("Solving %d frames within %.1fs", len(self.frames), self.time_budget_seconds)
        finished = self._search()

        if self.cancelled:
            return LayoutSolution(outcome=SolveOutcome.CANCELLED)

        if self._timed_out:
            outcome = SolveOutcome.TIMED_OUT
        elif finished:
            outcome = SolveOutcome.SOLVED
        else:
            outcome = SolveOutcome.EXHAUSTED
        if outcome is not SolveOutcome.SOLVED:
            logger.warning(
                "Backtracking %s, returning best-effort layout; overlapping events: %s",
                outcome.value,
                self.unresolved_ids(),
            )
        return LayoutSolution(
            outcome=outcome,
            frames={frame.event_id: frame.to_rect() for frame in self.frames},
        )

    def unresolved_ids(self) -> List[int]:
        unresolved: set[int] = set()
        for depth, frame in enumerate(self.frames):
            for earlier in range(depth):
                if self.collisions[depth][earlier] and frame.overlaps(self.frames[earlier]):
                    unresolved.update((frame.event_id, self.frames[earlier].event_id))
        return sorted(unresolved)

    def _should_stop(self) -> bool:
        if self._cancel_event.is_set():
            return True
        if self._clock() - self._started_at > self.time_budget_seconds:
            self._timed_out = True
            return True
        return False

    def _consistent(self, depth: int) -> bool:
        frame = self.frames[depth]
        row = self.collisions[depth]
        for earlier in range(depth):
            if row[earlier] and frame.overlaps(self.frames[earlier]):
                return False
        return True

    def _search(self) -> bool:
        # True when every frame holds a consistent candidate, or when the
        # search was stopped early (cancelled or out of time).
        count = len(self.frames)
        if count == 0:
            return True
        initial = [frame.placement() for frame in self.frames]
        cursors = [0] * count
        depth = 0
        while depth >= 0:
            frame = self.frames[depth]
            domain = self.domains[depth]
            placed = False
            while cursors[depth] < len(domain):
                if self._should_stop():
                    return True
                frame.apply(domain[cursors[depth]])
                cursors[depth] += 1
                if self._consistent(depth):
                    placed = True
                    break
            if not placed:
                frame.apply(initial[depth])
                cursors[depth] = 0
                depth -= 1
                continue
            if depth == count - 1:
                return True
            depth += 1
        return False
