from __future__ import annotations

from collections.abc import Callable

from domain.ports.dispatch import ResultDispatcher


class InlineDispatcher(ResultDispatcher):
    def dispatch(self, callback: Callable[[], None]) -> None:
        callback()
