from __future__ import annotations

import sys
import time
from pathlib import Path
from typing import Any, Sequence, cast

from langgraph.graph import END, START, StateGraph

from vcs_update.core.errors import ProviderOperationError
from vcs_update.core.types import OperationKind, Outcome, ProviderSession, Root
from vcs_update.observability import bind_chain, get_logger, set_round, set_state
from vcs_update.observability.ids import new_chain_id
from vcs_update.providers import CancellationToken, NullProgress, ProgressSink, ProviderRegistry

from .chain_state import ChainState
from .collaborators import (
    BatchChangeListener,
    ChangeTracker,
    Notifier,
    NullChangeTracker,
    NullNotifier,
    NullSnapshotService,
    SnapshotService,
)
from .continuation import ContinuationController, ContinuationRegistry
from .dispatch import ProviderPlan
from .guard import background_operation, batch_change, suspended
from .outcome import ChainReport, build_report
from .rounds import RoundExecutor

# Chains end when providers stop handing out continuations; the graph must not cap them.
_UNBOUNDED_STEPS = sys.maxsize

_MARKS_DIRTY = (Outcome.COMPLETED, Outcome.COMPLETED_WITH_ERRORS)


class UpdateChain:
    """Runs update rounds until no provider reports pending work.

    run_round → decide → (next_round → run_round | END)

    The whole chain runs on the calling thread. Tracker suspension, the
    background-operation flag, batch-change listeners and the two history
    checkpoints bracket the chain as a whole, never a single round.
    """

    def __init__(
        self,
        *,
        plans: list[ProviderPlan],
        roots: list[Root],
        registry: ProviderRegistry,
        operation: OperationKind = OperationKind.UPDATE,
        name: str | None = None,
        tracker: ChangeTracker | None = None,
        snapshots: SnapshotService | None = None,
        notifier: Notifier | None = None,
        batch_listeners: Sequence[BatchChangeListener] = (),
        progress: ProgressSink | None = None,
        cancel: CancellationToken | None = None,
    ) -> None:
        self._plans = list(plans)
        self._roots = list(roots)
        self._registry = registry
        self._operation = operation
        self._name = name or operation.display_name
        self._tracker = tracker or NullChangeTracker()
        self._snapshots = snapshots or NullSnapshotService()
        self._notifier = notifier or NullNotifier()
        self._batch_listeners = list(batch_listeners)
        self._progress = progress or NullProgress()
        self._cancel = cancel or CancellationToken()

        self.continuations = ContinuationRegistry()
        self._executor = RoundExecutor()
        self._controller = ContinuationController()
        self._log = get_logger("vcs_update.chain")
        self._graph = self._build_graph()

    def run(self) -> ChainReport:
        bind_chain(chain_id=new_chain_id())
        set_state("START")
        self._log.info(
            "chain_start",
            operation=self._operation.value,
            providers=[p.provider_id for p in self._plans],
            roots=[str(r) for r in self._roots],
        )

        t0 = time.perf_counter()
        with (
            background_operation(self._registry),
            suspended(self._tracker, enabled=self._operation.suspends_tracking),
            batch_change(self._batch_listeners),
        ):
            before = self._snapshots.put_checkpoint()
            try:
                final = cast(
                    ChainState,
                    self._graph.invoke(
                        {"round_number": 1, "errors": []},
                        config={"recursion_limit": _UNBOUNDED_STEPS},
                    ),
                )
            finally:
                self.continuations.clear()
                after = self._snapshots.put_checkpoint()

            last_round = final["round"]
            outcome = final["outcome"]
            errors = list(final.get("errors", []))
            set_state("FINISH")
            self._progress.set_text("Synchronizing files")
            if outcome is not Outcome.CANCELLED:
                refresh_errors = self._run_refresh_callbacks(last_round.sessions)
                if refresh_errors:
                    errors.extend(refresh_errors)
                    outcome = Outcome.COMPLETED_WITH_ERRORS
            if outcome in _MARKS_DIRTY:
                changed = [Path(p) for p, _ in last_round.updated_files.iter_files()]
                if changed:
                    self._tracker.mark_dirty(changed)

        report = build_report(
            outcome=outcome,
            round_number=final["round_number"],
            updated_files=last_round.updated_files,
            errors=errors,
            roots=self._roots,
            name=self._name,
            checkpoint_before=before,
            checkpoint_after=after,
            can_group_by_changelist=self._can_group_by_changelist(),
        )
        self._log.info(
            "chain_done",
            outcome=outcome.value,
            rounds=report.round_number,
            changed_files=len(report.updated_files),
            errors=len(report.errors),
            latency_ms=round((time.perf_counter() - t0) * 1000, 2),
        )
        self._notifier.notify(report)
        return report

    def _run_refresh_callbacks(self, sessions: list[ProviderSession]) -> list[ProviderOperationError]:
        errors: list[ProviderOperationError] = []
        for session in sessions:
            if session.on_refresh_completed is None:
                continue
            try:
                session.on_refresh_completed()
            except Exception as e:  # noqa: BLE001
                self._log.exception("refresh_callback_failed", provider_id=session.provider_id)
                error = ProviderOperationError(f"{type(e).__name__}: {e}", provider_id=session.provider_id)
                error.__cause__ = e
                errors.append(error)
        return errors

    def _can_group_by_changelist(self) -> bool:
        if not self._operation.can_group_by_changelist:
            return False
        return any(self._registry.provider(p.provider_id).supports_changelist_grouping for p in self._plans)

    def _build_graph(self):
        def run_round_node(state: ChainState) -> dict[str, Any]:
            result = self._executor.run(
                self._plans,
                self.continuations,
                self._progress,
                self._cancel,
                state["round_number"],
            )
            return {"round": result, "errors": list(result.errors)}

        def decide_node(state: ChainState) -> dict[str, Any]:
            set_state("DECIDE")
            decision = self._controller.decide(state["round"], self.continuations, state.get("errors", []))
            update: dict[str, Any] = {"proceed": decision.proceed}
            if decision.outcome is not None:
                update["outcome"] = decision.outcome
            if decision.warning is not None:
                self._log.warning("chain_interrupted_with_pending_work", pending=decision.warning.pending_messages)
                update["errors"] = [decision.warning]
            return update

        def next_round_node(state: ChainState) -> dict[str, Any]:
            number = state["round_number"] + 1
            set_round(number)
            self._log.info("chain_continue", next_round=number)
            return {"round_number": number}

        def route(state: ChainState) -> str:
            return "next_round" if state.get("proceed") else END

        builder = StateGraph(ChainState)
        builder.add_node("run_round", run_round_node)
        builder.add_node("decide", decide_node)
        builder.add_node("next_round", next_round_node)

        builder.add_edge(START, "run_round")
        builder.add_edge("run_round", "decide")
        builder.add_conditional_edges("decide", route, ["next_round", END])
        builder.add_edge("next_round", "run_round")

        return builder.compile()
