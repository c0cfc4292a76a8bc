"""Root resolution.

Two composable passes: `filter_updatable` keeps the paths some provider can
update under the requested scope mode, then `filter_descendants` applies the
generic ancestor-wins rule. Provider-specific collapsing happens later in
`dispatch.build`, which is authoritative per provider.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Iterable

from vcs_update.core.paths import filter_descendants, is_ancestor, normalize
from vcs_update.core.types import OperationKind, Root, ScopeMode
from vcs_update.observability import get_logger
from vcs_update.providers import ProviderRegistry

_log = get_logger("vcs_update.roots")


def _contains_versioned_root(directory: Path, registry: ProviderRegistry) -> bool:
    return any(is_ancestor(directory, root) for root in registry.versioned_roots())


def filter_updatable(
    paths: Iterable[Path],
    scope_mode: ScopeMode,
    registry: ProviderRegistry,
    operation: OperationKind,
) -> list[Path]:
    result: list[Path] = []
    for p in paths:
        provider = registry.provider_for(p)
        if provider is None:
            continue

        if provider.update_environment(operation) is None:
            continue

        if scope_mode is ScopeMode.ANY or provider.is_tracked(p):
            result.append(p)
        # Status lookup failed; a directory holding a deeper repository root still counts.
        elif scope_mode is ScopeMode.ROOT_MEMBERSHIP and p.is_dir() and _contains_versioned_root(p, registry):
            result.append(p)

    return result


def resolve(
    requested_paths: Iterable[str | os.PathLike[str]],
    scope_mode: ScopeMode,
    registry: ProviderRegistry,
    operation: OperationKind,
) -> list[Root]:
    """Resolve requested paths into provider-owned roots.

    Paths without an owning provider or update capability are dropped silently.
    An empty result means nothing is updatable; callers treat it as a no-op.
    """

    normalized = [normalize(p) for p in requested_paths]
    survivors = filter_descendants(filter_updatable(normalized, scope_mode, registry, operation))

    roots: list[Root] = []
    for p in survivors:
        provider = registry.provider_for(p)
        if provider is None:  # pragma: no cover - filtered above
            continue
        roots.append(Root(path=p, provider_id=provider.provider_id, is_directory=not p.is_file()))

    if not roots:
        _log.info("no_updatable_roots", requested=len(normalized), scope=scope_mode.value)
    return roots
