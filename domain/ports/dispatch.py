from __future__ import annotations

from collections.abc import Callable
from typing import Protocol


class ResultDispatcher(Protocol):
    """Hands a callback over to the context that owns the result.

    ``dispatch`` returns only after the callback has run there.
    """

    def dispatch(self, callback: Callable[[], None]) -> None: ...
