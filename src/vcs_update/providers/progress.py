from __future__ import annotations

import threading
from typing import Protocol

from vcs_update.core.errors import CancellationSignal


class ProgressSink(Protocol):
    def set_fraction(self, fraction: float) -> None: ...

    def set_text(self, text: str) -> None: ...


class NullProgress:
    def set_fraction(self, fraction: float) -> None:
        _ = fraction

    def set_text(self, text: str) -> None:
        _ = text


class CancellationToken:
    """Caller-owned cancellation flag shared with the worker and the providers."""

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def is_cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise CancellationSignal("update cancelled")
