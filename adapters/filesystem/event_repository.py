from __future__ import annotations

from pathlib import Path

from filelock import FileLock

from adapters.filesystem.json_utils import load_json, write_json_atomic
from domain.models import EventBatch, LayoutSolution
from domain.ports.repositories import EventRepository, LayoutRepository


class FileSystemEventRepository(EventRepository):
    def load(self, path: Path) -> EventBatch:
        content = load_json(path)
        if isinstance(content, list):
            content = {"events": content}
        return EventBatch.model_validate(content)


class FileSystemLayoutRepository(LayoutRepository):
    def save(self, solution: LayoutSolution, path: Path) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        lock_path = path.with_suffix(f"{path.suffix}.lock")
        with FileLock(str(lock_path)):
            write_json_atomic(path, solution.to_dict())
