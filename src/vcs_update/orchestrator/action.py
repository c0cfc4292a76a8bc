from __future__ import annotations

import enum
import os
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Iterable, Sequence

from vcs_update.core.config import UpdateConfig
from vcs_update.core.errors import ValidationError
from vcs_update.core.types import OperationKind, Root, ScopeMode
from vcs_update.observability import configure_logging, get_logger
from vcs_update.providers import CancellationToken, ProgressSink, ProviderRegistry

from . import dispatch, roots as root_resolver
from .chain import UpdateChain
from .collaborators import BatchChangeListener, ChangeTracker, Notifier, SnapshotService
from .outcome import ChainReport


class Availability(enum.Enum):
    HIDDEN = "hidden"
    DISABLED = "disabled"
    ENABLED = "enabled"


@dataclass(slots=True)
class ActionResult:
    roots: list[Root] = field(default_factory=list)
    validation_error: ValidationError | None = None
    report: ChainReport | None = None

    @property
    def started(self) -> bool:
        return self.report is not None


class UpdateAction:
    """Entry point: resolve roots, dispatch to providers, validate, run the chain."""

    def __init__(
        self,
        *,
        registry: ProviderRegistry,
        operation: OperationKind = OperationKind.UPDATE,
        scope: ScopeMode = ScopeMode.ROOT_MEMBERSHIP,
        name: str | None = None,
        tracker: ChangeTracker | None = None,
        snapshots: SnapshotService | None = None,
        notifier: Notifier | None = None,
        batch_listeners: Sequence[BatchChangeListener] = (),
    ) -> None:
        self._registry = registry
        self._operation = operation
        self._scope = scope
        self._name = name or operation.display_name
        self._tracker = tracker
        self._snapshots = snapshots
        self._notifier = notifier
        self._batch_listeners = list(batch_listeners)
        self._worker: ThreadPoolExecutor | None = None
        self._log = get_logger("vcs_update.action")

    @classmethod
    def from_config(
        cls,
        config: UpdateConfig,
        *,
        registry: ProviderRegistry,
        tracker: ChangeTracker | None = None,
        snapshots: SnapshotService | None = None,
        notifier: Notifier | None = None,
        batch_listeners: Sequence[BatchChangeListener] = (),
    ) -> UpdateAction:
        configure_logging(config.logging.level)
        return cls(
            registry=registry,
            operation=config.update.operation,
            scope=config.update.scope,
            name=config.update.display_name,
            tracker=tracker,
            snapshots=snapshots,
            notifier=notifier,
            batch_listeners=batch_listeners,
        )

    @property
    def name(self) -> str:
        return self._name

    def resolve(self, paths: Iterable[str | os.PathLike[str]]) -> list[Root]:
        return root_resolver.resolve(paths, self._scope, self._registry, self._operation)

    def availability(self, paths: Iterable[str | os.PathLike[str]]) -> Availability:
        if not self._registry.supports(self._operation) or not self.resolve(paths):
            return Availability.HIDDEN
        if self._registry.is_background_operation_running:
            return Availability.DISABLED
        return Availability.ENABLED

    def perform(
        self,
        paths: Iterable[str | os.PathLike[str]],
        *,
        cancel: CancellationToken | None = None,
        progress: ProgressSink | None = None,
    ) -> ActionResult:
        """Run the whole chain on the calling thread.

        Nothing updatable is a no-op; a provider rejecting its options stops
        everything before any update runs. Both come back as data.
        """

        resolved = self.resolve(paths)
        if not resolved:
            return ActionResult()

        plans = dispatch.build(resolved, self._registry, self._operation)
        if not plans:
            self._log.info("no_update_plans", roots=[str(r) for r in resolved])
            return ActionResult(roots=resolved)

        rejected = dispatch.validate(plans)
        if rejected is not None:
            return ActionResult(roots=resolved, validation_error=rejected)

        chain = UpdateChain(
            plans=plans,
            roots=resolved,
            registry=self._registry,
            operation=self._operation,
            name=self._name,
            tracker=self._tracker,
            snapshots=self._snapshots,
            notifier=self._notifier,
            batch_listeners=self._batch_listeners,
            progress=progress,
            cancel=cancel,
        )
        return ActionResult(roots=resolved, report=chain.run())

    def perform_in_background(
        self,
        paths: Iterable[str | os.PathLike[str]],
        *,
        cancel: CancellationToken | None = None,
        progress: ProgressSink | None = None,
    ) -> Future[ActionResult]:
        """Run `perform` on the single update worker; the future resolves once the chain has terminated."""

        if self._worker is None:
            self._worker = ThreadPoolExecutor(max_workers=1, thread_name_prefix="vcs-update")
        return self._worker.submit(self.perform, list(paths), cancel=cancel, progress=progress)

    def shutdown(self, *, wait: bool = True) -> None:
        if self._worker is not None:
            self._worker.shutdown(wait=wait)
            self._worker = None
