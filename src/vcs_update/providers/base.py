from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Sequence

from vcs_update.core.files import UpdatedFiles
from vcs_update.core.paths import filter_descendants
from vcs_update.core.types import Continuation, OperationKind, ProviderSession, Root

from .progress import CancellationToken, ProgressSink


class UpdateEnvironment(ABC):
    """Update capability of one provider for one operation kind.

    `update` must be safely callable again with the continuation it returned,
    report progress through `progress` and observe `cancel` cooperatively
    (`cancel.raise_if_cancelled()` or a session with `cancelled=True`).
    """

    def validate_options(self, roots: Sequence[Root]) -> bool:
        _ = roots
        return True

    def compute_minimal_covering_roots(self, paths: Sequence[Path]) -> list[Path]:
        """Provider-specific canonicalisation; ancestor-wins unless overridden."""

        return filter_descendants(paths)

    def fill_groups(self, updated_files: UpdatedFiles) -> None:
        """Register provider-specific file groups before an update runs."""

        _ = updated_files

    @abstractmethod
    def update(
        self,
        roots: Sequence[Root],
        continuation: Continuation,
        *,
        progress: ProgressSink,
        cancel: CancellationToken,
    ) -> ProviderSession: ...


class VcsProvider(ABC):
    provider_id: str
    supports_changelist_grouping: bool = False

    @abstractmethod
    def is_tracked(self, path: Path) -> bool:
        """Whether the on-disk status says `path` is under version control."""

    @abstractmethod
    def update_environment(self, operation: OperationKind) -> UpdateEnvironment | None:
        """The capability for `operation`, or None when the provider cannot do it."""
