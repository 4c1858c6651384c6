from __future__ import annotations

import threading
from collections.abc import Mapping
from typing import Protocol

from domain.models import ColumnSize, Event, LayoutSolution


class LayoutEngine(Protocol):
    def layout(
        self,
        events: Mapping[int, Event],
        column: ColumnSize,
        cancel_event: threading.Event | None = None,
    ) -> LayoutSolution:
        ...
