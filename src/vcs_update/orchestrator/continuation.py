"""Continuation registry and the repeat-or-stop decision.

A provider that hands back a `Pending` continuation asks for another round.
The chain only repeats when the round was clean: cancellation, conflicts and
errors all end it, and whatever work is still pending is reported as an
`InterruptedWithPendingWork` warning instead.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator

from vcs_update.core.errors import InterruptedWithPendingWork, ProviderOperationError
from vcs_update.core.types import NO_MORE_WORK, Continuation, NoMoreWork, Outcome, Pending

from .rounds import RoundResult


class ContinuationRegistry:
    """provider id -> last continuation seen in this chain."""

    def __init__(self) -> None:
        self._entries: dict[str, Continuation] = {}

    def get(self, provider_id: str) -> Continuation:
        return self._entries.get(provider_id, NO_MORE_WORK)

    def put(self, provider_id: str, continuation: Continuation) -> None:
        self._entries[provider_id] = continuation

    def pending(self) -> Iterator[tuple[str, Pending]]:
        for provider_id, continuation in self._entries.items():
            if isinstance(continuation, Pending):
                yield provider_id, continuation
            elif not isinstance(continuation, NoMoreWork):
                raise TypeError(f"unexpected continuation for {provider_id!r}: {continuation!r}")

    def has_pending(self) -> bool:
        return any(True for _ in self.pending())

    def interrupted_warning(self) -> InterruptedWithPendingWork | None:
        messages = [c.message_for(provider_id) for provider_id, c in self.pending()]
        if not messages:
            return None
        return InterruptedWithPendingWork(messages)

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)


@dataclass(frozen=True, slots=True)
class Decision:
    proceed: bool
    outcome: Outcome | None = None
    warning: InterruptedWithPendingWork | None = None

    @classmethod
    def repeat(cls) -> Decision:
        return cls(proceed=True)

    @classmethod
    def stop(cls, outcome: Outcome, warning: InterruptedWithPendingWork | None = None) -> Decision:
        return cls(proceed=False, outcome=outcome, warning=warning)


class ContinuationController:
    def decide(
        self,
        round_result: RoundResult,
        registry: ContinuationRegistry,
        cumulative_errors: list[ProviderOperationError],
    ) -> Decision:
        decision = self._decide(round_result, registry, cumulative_errors)
        if not decision.proceed:
            registry.clear()
        return decision

    def _decide(
        self,
        round_result: RoundResult,
        registry: ContinuationRegistry,
        cumulative_errors: list[ProviderOperationError],
    ) -> Decision:
        if round_result.cancelled:
            return Decision.stop(Outcome.CANCELLED)

        pending = registry.has_pending()

        # Conflicts need the user before anything else is pulled in.
        if pending and round_result.updated_files.has_conflicts():
            return Decision.stop(Outcome.COMPLETED_WITH_ERRORS, registry.interrupted_warning())

        if round_result.errors:
            return Decision.stop(Outcome.COMPLETED_WITH_ERRORS, registry.interrupted_warning())

        if pending:
            return Decision.repeat()

        # A repeated chain already brought changes in earlier rounds.
        if round_result.number == 1 and round_result.updated_files.is_empty() and not cumulative_errors:
            return Decision.stop(Outcome.ALL_UP_TO_DATE)
        return Decision.stop(Outcome.COMPLETED)
