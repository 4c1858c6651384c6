from __future__ import annotations

import threading
import time
from collections.abc import Callable, Mapping
from dataclasses import dataclass

from domain.models import ColumnSize, Event, LayoutSolution, SolveOutcome
from domain.ports.layout import LayoutEngine
from domain.services.backtracking_solver import DEFAULT_TIME_BUDGET_SECONDS, BacktrackingSolver
from domain.services.build_frames import build_frames
from domain.services.placement_domain import DomainStrategy
from domain.services.sweep_collisions import sweep_frames


@dataclass(frozen=True)
class LayoutConfig:
    strategy: DomainStrategy = DomainStrategy.SUB_OPTIMAL
    time_budget_seconds: float = DEFAULT_TIME_BUDGET_SECONDS
    clock: Callable[[], float] = time.monotonic


class ColumnLayoutEngine(LayoutEngine):
    def __init__(self, config: LayoutConfig | None = None) -> None:
        self.config = config or LayoutConfig()

    def layout(
        self,
        events: Mapping[int, Event],
        column: ColumnSize,
        cancel_event: threading.Event | None = None,
    ) -> LayoutSolution:
        cancel_event = cancel_event or threading.Event()
        if cancel_event.is_set():
            return LayoutSolution(outcome=SolveOutcome.CANCELLED)

        frames = build_frames(events, column)
        sweep = sweep_frames(frames, column.width, self.config.strategy)

        if not sweep.has_collisions:
            if cancel_event.is_set():
                return LayoutSolution(outcome=SolveOutcome.CANCELLED)
            return LayoutSolution(
                outcome=SolveOutcome.NO_COLLISIONS,
                frames={frame.event_id: frame.to_rect() for frame in sweep.frames},
            )

        solver = BacktrackingSolver.from_sweep(
            sweep,
            time_budget_seconds=self.config.time_budget_seconds,
            cancel_event=cancel_event,
            clock=self.config.clock,
        )
        return solver.solve()
