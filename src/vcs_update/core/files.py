"""Changed-file accumulator.

Files are recorded per group (updated, merged with conflicts, removed, ...).
Groups form an ordered tree: providers may register extra groups, optionally
nested under a standard one, before they start recording files.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Iterator

UPDATED = "UPDATED"
CREATED = "CREATED"
REMOVED = "REMOVED"
RESTORED = "RESTORED"
MERGED = "MERGED"
MERGED_WITH_CONFLICTS = "MERGED_WITH_CONFLICTS"
SKIPPED = "SKIPPED"
UNKNOWN = "UNKNOWN"

_STANDARD_GROUPS: tuple[tuple[str, str], ...] = (
    (UPDATED, "Updated"),
    (CREATED, "Created"),
    (REMOVED, "Removed"),
    (RESTORED, "Restored"),
    (MERGED, "Merged"),
    (MERGED_WITH_CONFLICTS, "Merged with conflicts"),
    (SKIPPED, "Skipped"),
    (UNKNOWN, "Not in repository"),
)


@dataclass(slots=True)
class FileGroup:
    group_id: str
    name: str
    # dict keeps insertion order and doubles as an ordered set.
    files: dict[str, None] = field(default_factory=dict)
    children: list[FileGroup] = field(default_factory=list)

    def add(self, path: str) -> None:
        self.files[str(path)] = None

    def is_empty(self) -> bool:
        return not self.files and all(c.is_empty() for c in self.children)

    def count(self) -> int:
        return len(self.files)


class UpdatedFiles:
    """Ordered tree of file groups for one round (or one provider session)."""

    def __init__(self) -> None:
        self._top: list[FileGroup] = []
        self._by_id: dict[str, FileGroup] = {}
        for group_id, name in _STANDARD_GROUPS:
            self.register_group(group_id, name)

    def register_group(self, group_id: str, name: str, *, parent: str | None = None) -> FileGroup:
        existing = self._by_id.get(group_id)
        if existing is not None:
            return existing

        group = FileGroup(group_id=group_id, name=name)
        if parent is None:
            self._top.append(group)
        else:
            self.group(parent).children.append(group)
        self._by_id[group_id] = group
        return group

    def group(self, group_id: str) -> FileGroup:
        try:
            return self._by_id[group_id]
        except KeyError:
            raise KeyError(f"unknown file group: {group_id!r}") from None

    def has_group(self, group_id: str) -> bool:
        return group_id in self._by_id

    def add(self, group_id: str, path: str) -> None:
        self.group(group_id).add(path)

    def add_all(self, group_id: str, paths: Iterable[str]) -> None:
        group = self.group(group_id)
        for p in paths:
            group.add(p)

    @property
    def top_level_groups(self) -> list[FileGroup]:
        return list(self._top)

    def is_empty(self) -> bool:
        return all(g.is_empty() for g in self._top)

    def has_conflicts(self) -> bool:
        return not self.group(MERGED_WITH_CONFLICTS).is_empty()

    def iter_groups(self) -> Iterator[tuple[FileGroup, FileGroup | None]]:
        """Depth-first walk yielding (group, parent)."""

        def walk(groups: list[FileGroup], parent: FileGroup | None) -> Iterator[tuple[FileGroup, FileGroup | None]]:
            for g in groups:
                yield g, parent
                yield from walk(g.children, g)

        return walk(self._top, None)

    def iter_files(self) -> Iterator[tuple[str, str]]:
        for group, _ in self.iter_groups():
            for path in group.files:
                yield path, group.group_id

    def merge(self, other: UpdatedFiles) -> None:
        for group, parent in other.iter_groups():
            self.register_group(
                group.group_id,
                group.name,
                parent=parent.group_id if parent is not None else None,
            )
            self.add_all(group.group_id, group.files)

    def __len__(self) -> int:
        return sum(g.count() for g, _ in self.iter_groups())

    def __repr__(self) -> str:
        counts = {g.group_id: g.count() for g, _ in self.iter_groups() if g.count()}
        return f"UpdatedFiles({counts!r})"
