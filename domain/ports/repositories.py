from __future__ import annotations

from pathlib import Path
from typing import Protocol

from domain.models import EventBatch, LayoutSolution


class EventRepository(Protocol):
    def load(self, path: Path) -> EventBatch: ...


class LayoutRepository(Protocol):
    def save(self, solution: LayoutSolution, path: Path) -> None: ...
