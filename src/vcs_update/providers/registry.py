from __future__ import annotations

import os
import threading
from pathlib import Path

from vcs_update.core.paths import is_ancestor, normalize
from vcs_update.core.types import OperationKind

from .base import VcsProvider


class ProviderRegistry:
    """Maps registered directories to the provider that versions them.

    The deepest registered directory containing a path owns it. The registry
    also tracks whether a background VCS operation is currently running.
    """

    def __init__(self) -> None:
        self._providers: dict[str, VcsProvider] = {}
        self._mappings: list[tuple[Path, str]] = []
        self._lock = threading.Lock()
        self._background_operations = 0

    def register(self, provider: VcsProvider, *roots: str | os.PathLike[str]) -> None:
        self._providers[provider.provider_id] = provider
        for r in roots:
            self._mappings.append((normalize(r), provider.provider_id))
        # Deepest mapping first so lookups hit the innermost repository.
        self._mappings.sort(key=lambda m: len(m[0].parts), reverse=True)

    def provider(self, provider_id: str) -> VcsProvider:
        return self._providers[provider_id]

    def provider_for(self, path: Path) -> VcsProvider | None:
        for root, provider_id in self._mappings:
            if is_ancestor(root, path):
                return self._providers[provider_id]
        return None

    def versioned_roots(self) -> list[Path]:
        return [root for root, _ in self._mappings]

    def active_providers(self) -> list[VcsProvider]:
        active = {provider_id for _, provider_id in self._mappings}
        return [p for pid, p in self._providers.items() if pid in active]

    def supports(self, operation: OperationKind) -> bool:
        return any(p.update_environment(operation) is not None for p in self.active_providers())

    def stop_background_operation(self) -> None:
        with self._lock:
            if self._background_operations == 0:
                raise RuntimeError("no background operation is running")
            self._background_operations -= 1

    def try_start_background_operation(self) -> bool:
        with self._lock:
            if self._background_operations:
                return False
            self._background_operations += 1
            return True

    @property
    def is_background_operation_running(self) -> bool:
        with self._lock:
            return self._background_operations > 0
