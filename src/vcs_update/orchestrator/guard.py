"""Scoped brackets around a whole update chain."""

from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator, Sequence

from vcs_update.core.errors import ChainAlreadyRunning
from vcs_update.observability import get_logger
from vcs_update.providers import ProviderRegistry

from .collaborators import BatchChangeListener, ChangeTracker

_log = get_logger("vcs_update.guard")


@contextmanager
def suspended(tracker: ChangeTracker, *, enabled: bool) -> Iterator[None]:
    """Suspend the background change-tracker; resume exactly once on every exit path."""

    if not enabled:
        yield
        return

    tracker.suspend()
    _log.debug("tracker_suspended")
    try:
        yield
    finally:
        tracker.resume()
        _log.debug("tracker_resumed")


@contextmanager
def background_operation(registry: ProviderRegistry) -> Iterator[None]:
    if not registry.try_start_background_operation():
        raise ChainAlreadyRunning("another VCS background operation is running")
    try:
        yield
    finally:
        registry.stop_background_operation()


@contextmanager
def batch_change(listeners: Sequence[BatchChangeListener]) -> Iterator[None]:
    started: list[BatchChangeListener] = []
    try:
        for listener in listeners:
            listener.batch_change_started()
            started.append(listener)
        yield
    finally:
        for listener in reversed(started):
            listener.batch_change_completed()
