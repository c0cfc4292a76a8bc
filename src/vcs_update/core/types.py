from __future__ import annotations

import enum
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, TypeAlias

from .errors import ProviderOperationError
from .files import UpdatedFiles


@dataclass(frozen=True, slots=True)
class Root:
    """A resolved update root owned by exactly one provider."""

    path: Path
    provider_id: str
    is_directory: bool = True

    def __str__(self) -> str:
        return str(self.path)


@dataclass(frozen=True, slots=True)
class NoMoreWork:
    """The provider has nothing left to do in this chain."""


@dataclass(frozen=True, slots=True)
class Pending:
    """The provider wants another round; `data` is opaque to the orchestrator."""

    data: Any = None
    interrupted_message: str | None = None

    def message_for(self, provider_id: str) -> str:
        return self.interrupted_message or f"{provider_id}: update not completed"


Continuation: TypeAlias = NoMoreWork | Pending

NO_MORE_WORK = NoMoreWork()


@dataclass(slots=True)
class ProviderSession:
    """Result of one provider's update call within one round."""

    provider_id: str
    errors: list[ProviderOperationError] = field(default_factory=list)
    cancelled: bool = False
    continuation: Continuation = NO_MORE_WORK
    updated_files: UpdatedFiles = field(default_factory=UpdatedFiles)
    on_refresh_completed: Callable[[], None] | None = None

    @property
    def has_pending_work(self) -> bool:
        return isinstance(self.continuation, Pending)


class Outcome(enum.Enum):
    """How a finished chain is classified.

    `INTERRUPTED_WITH_PENDING_WORK` is never a chain outcome. It classifies the
    `InterruptedWithPendingWork` warning that a chain stopping with pending
    work adds to its errors; such a chain ends as `COMPLETED_WITH_ERRORS`.
    """

    ALL_UP_TO_DATE = "all_up_to_date"
    COMPLETED = "completed"
    COMPLETED_WITH_ERRORS = "completed_with_errors"
    CANCELLED = "cancelled"
    INTERRUPTED_WITH_PENDING_WORK = "interrupted_with_pending_work"


class ScopeMode(enum.Enum):
    ANY = "any"
    STRICT = "strict"
    ROOT_MEMBERSHIP = "root_membership"


class OperationKind(enum.Enum):
    """What the chain does to the working copy.

    Only a real update suspends the background change-tracker; integrate and
    status must never do so.
    """

    UPDATE = "update"
    INTEGRATE = "integrate"
    STATUS = "status"

    @property
    def suspends_tracking(self) -> bool:
        return self is OperationKind.UPDATE

    @property
    def display_name(self) -> str:
        return {
            OperationKind.UPDATE: "Update",
            OperationKind.INTEGRATE: "Integrate",
            OperationKind.STATUS: "Check Status",
        }[self]

    @property
    def can_group_by_changelist(self) -> bool:
        return self is OperationKind.UPDATE
