from __future__ import annotations

import os
from pathlib import Path
from typing import Iterable


def normalize(path: str | os.PathLike[str]) -> Path:
    """Absolute, lexically normalised path (symlinks are not resolved)."""

    return Path(os.path.normpath(os.path.abspath(os.fspath(path))))


def is_ancestor(ancestor: Path, path: Path, *, strict: bool = False) -> bool:
    if ancestor == path:
        return not strict
    return ancestor in path.parents


def filter_descendants(paths: Iterable[Path]) -> list[Path]:
    """Ancestor-wins: drop every path nested in (or equal to) an earlier survivor.

    Order of the survivors follows first occurrence.
    """

    ordered: list[Path] = []
    seen: set[Path] = set()
    for p in paths:
        if p not in seen:
            seen.add(p)
            ordered.append(p)

    return [p for p in ordered if not any(other != p and is_ancestor(other, p) for other in ordered)]
