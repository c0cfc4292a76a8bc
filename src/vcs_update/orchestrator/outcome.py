"""Folding the final round into a caller-visible report."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from vcs_update.core.errors import ProviderOperationError
from vcs_update.core.files import UpdatedFiles
from vcs_update.core.types import Outcome, Root


@dataclass(slots=True)
class ChainReport:
    outcome: Outcome
    round_number: int
    updated_files: UpdatedFiles
    errors: list[ProviderOperationError]
    grouped: dict[str, int]
    title: str
    message: str
    roots: list[Root] = field(default_factory=list)
    checkpoint_before: Any = None
    checkpoint_after: Any = None
    can_group_by_changelist: bool = False

    @property
    def warnings(self) -> list[ProviderOperationError]:
        return [e for e in self.errors if e.is_warning]


def grouped_counts(updated_files: UpdatedFiles) -> dict[str, int]:
    """group name -> file count, non-empty groups only, depth-first."""

    return {g.name: g.count() for g, _ in updated_files.iter_groups() if g.count() > 0}


def notification_text(updated_files: UpdatedFiles) -> str:
    return "\n".join(f"{count} Files {name}" for name, count in grouped_counts(updated_files).items())


def up_to_date_message(roots: list[Root]) -> str:
    if len(roots) == 1 and not roots[0].is_directory:
        return "File is up to date"
    return "All files are up to date"


def error_summary(errors: list[ProviderOperationError]) -> str:
    text = str(errors[0])
    first = text.splitlines()[0] if text else type(errors[0]).__name__
    if len(errors) == 1:
        return first
    return f"{first} (and {len(errors) - 1} more)"


def chain_title(name: str, round_number: int, *, will_continue: bool = False) -> str:
    if will_continue or round_number > 1:
        return f"{name} #{round_number}"
    return name


def build_report(
    *,
    outcome: Outcome,
    round_number: int,
    updated_files: UpdatedFiles,
    errors: list[ProviderOperationError],
    roots: list[Root],
    name: str,
    checkpoint_before: Any = None,
    checkpoint_after: Any = None,
    can_group_by_changelist: bool = False,
) -> ChainReport:
    """Changed files come from the final round only; errors accumulate over the chain."""

    if outcome is Outcome.ALL_UP_TO_DATE:
        message = up_to_date_message(roots)
    elif outcome is Outcome.CANCELLED:
        message = "Update cancelled"
    else:
        message = notification_text(updated_files)
        if not message:
            message = error_summary(errors) if errors else up_to_date_message(roots)

    return ChainReport(
        outcome=outcome,
        round_number=round_number,
        updated_files=updated_files,
        errors=list(errors),
        grouped=grouped_counts(updated_files),
        title=chain_title(name, round_number),
        message=message,
        roots=list(roots),
        checkpoint_before=checkpoint_before,
        checkpoint_after=checkpoint_after,
        can_group_by_changelist=can_group_by_changelist,
    )
