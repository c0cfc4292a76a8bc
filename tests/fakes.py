"""In-memory providers and collaborators for orchestration tests."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Sequence

from vcs_update.core.files import UpdatedFiles
from vcs_update.core.types import NO_MORE_WORK, Continuation, OperationKind, ProviderSession, Root
from vcs_update.providers import CancellationToken, ProgressSink, UpdateEnvironment, VcsProvider

Step = Callable[[Sequence[Root], Continuation, CancellationToken], ProviderSession]


def session(
    provider_id: str,
    *,
    updated: Sequence[str] = (),
    conflicts: Sequence[str] = (),
    errors: Sequence[Exception] = (),
    cancelled: bool = False,
    continuation: Continuation = NO_MORE_WORK,
) -> ProviderSession:
    files = UpdatedFiles()
    files.add_all("UPDATED", updated)
    files.add_all("MERGED_WITH_CONFLICTS", conflicts)
    return ProviderSession(
        provider_id=provider_id,
        errors=list(errors),  # type: ignore[arg-type]
        cancelled=cancelled,
        continuation=continuation,
        updated_files=files,
    )


@dataclass
class UpdateCall:
    roots: list[Path]
    continuation: Continuation


class ScriptedEnvironment(UpdateEnvironment):
    """Plays back one step per update call; the last step repeats."""

    def __init__(
        self,
        provider_id: str,
        steps: Sequence[ProviderSession | Exception | Step] = (),
        *,
        valid: bool = True,
        collapse_to: Sequence[Path] | None = None,
        extra_groups: Sequence[tuple[str, str]] = (),
    ) -> None:
        self.provider_id = provider_id
        self.steps = list(steps) or [session(provider_id)]
        self.valid = valid
        self.collapse_to = collapse_to
        self.extra_groups = list(extra_groups)
        self.calls: list[UpdateCall] = []
        self.validated: list[list[Path]] = []

    def validate_options(self, roots: Sequence[Root]) -> bool:
        self.validated.append([r.path for r in roots])
        return self.valid

    def compute_minimal_covering_roots(self, paths: Sequence[Path]) -> list[Path]:
        if self.collapse_to is not None:
            return list(self.collapse_to)
        return super().compute_minimal_covering_roots(paths)

    def fill_groups(self, updated_files: UpdatedFiles) -> None:
        for group_id, name in self.extra_groups:
            updated_files.register_group(group_id, name, parent="UPDATED")

    def update(
        self,
        roots: Sequence[Root],
        continuation: Continuation,
        *,
        progress: ProgressSink,
        cancel: CancellationToken,
    ) -> ProviderSession:
        self.calls.append(UpdateCall(roots=[r.path for r in roots], continuation=continuation))
        step = self.steps[min(len(self.calls), len(self.steps)) - 1]
        if isinstance(step, Exception):
            raise step
        if isinstance(step, ProviderSession):
            return step
        return step(roots, continuation, cancel)


class FakeProvider(VcsProvider):
    def __init__(
        self,
        provider_id: str,
        environment: UpdateEnvironment | None = None,
        *,
        tracked: Callable[[Path], bool] | None = None,
        operations: Sequence[OperationKind] = (OperationKind.UPDATE,),
        supports_changelist_grouping: bool = False,
    ) -> None:
        self.provider_id = provider_id
        self.environment = environment
        self._tracked = tracked or (lambda p: True)
        self._operations = set(operations)
        self.supports_changelist_grouping = supports_changelist_grouping

    def is_tracked(self, path: Path) -> bool:
        return self._tracked(path)

    def update_environment(self, operation: OperationKind) -> UpdateEnvironment | None:
        if operation not in self._operations:
            return None
        return self.environment


@dataclass
class RecordingTracker:
    suspends: int = 0
    resumes: int = 0
    dirty: list[Path] = field(default_factory=list)
    events: list[str] = field(default_factory=list)

    def suspend(self) -> None:
        self.suspends += 1
        self.events.append("suspend")

    def resume(self) -> None:
        self.resumes += 1
        self.events.append("resume")

    def mark_dirty(self, paths: Sequence[Path]) -> None:
        self.dirty.extend(paths)
        self.events.append("dirty")


@dataclass
class RecordingSnapshots:
    taken: int = 0

    def put_checkpoint(self) -> Any:
        self.taken += 1
        return f"checkpoint-{self.taken}"


@dataclass
class RecordingNotifier:
    reports: list[Any] = field(default_factory=list)

    def notify(self, report: Any) -> None:
        self.reports.append(report)


@dataclass
class RecordingProgress:
    fractions: list[float] = field(default_factory=list)
    texts: list[str] = field(default_factory=list)

    def set_fraction(self, fraction: float) -> None:
        self.fractions.append(fraction)

    def set_text(self, text: str) -> None:
        self.texts.append(text)


@dataclass
class RecordingBatchListener:
    events: list[str] = field(default_factory=list)

    def batch_change_started(self) -> None:
        self.events.append("started")

    def batch_change_completed(self) -> None:
        self.events.append("completed")
