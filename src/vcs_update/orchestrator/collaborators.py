"""External collaborators the chain talks to.

Implementations live outside this package (history service, change-tracker,
notification UI); tests use in-memory fakes.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Any, Protocol, Sequence

if TYPE_CHECKING:
    from .outcome import ChainReport


class SnapshotService(Protocol):
    def put_checkpoint(self) -> Any: ...


class ChangeTracker(Protocol):
    def suspend(self) -> None: ...

    def resume(self) -> None: ...

    def mark_dirty(self, paths: Sequence[Path]) -> None: ...


class Notifier(Protocol):
    def notify(self, report: ChainReport) -> None: ...


class BatchChangeListener(Protocol):
    def batch_change_started(self) -> None: ...

    def batch_change_completed(self) -> None: ...


class NullSnapshotService:
    def put_checkpoint(self) -> Any:
        return None


class NullChangeTracker:
    def suspend(self) -> None:
        pass

    def resume(self) -> None:
        pass

    def mark_dirty(self, paths: Sequence[Path]) -> None:
        _ = paths


class NullNotifier:
    def notify(self, report: ChainReport) -> None:
        _ = report
