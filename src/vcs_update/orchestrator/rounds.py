from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from vcs_update.core.errors import CancellationSignal, ProviderOperationError
from vcs_update.core.files import UpdatedFiles
from vcs_update.core.types import NO_MORE_WORK, ProviderSession
from vcs_update.observability import get_logger, set_provider, set_round, set_state
from vcs_update.providers import CancellationToken, ProgressSink

from .dispatch import ProviderPlan

if TYPE_CHECKING:
    from .continuation import ContinuationRegistry


@dataclass(slots=True)
class RoundResult:
    number: int
    sessions: list[ProviderSession] = field(default_factory=list)
    updated_files: UpdatedFiles = field(default_factory=UpdatedFiles)
    errors: list[ProviderOperationError] = field(default_factory=list)
    cancelled: bool = False


class RoundExecutor:
    """Runs every provider once, in plan order, on the calling thread.

    Provider failures are captured into the round; they never stop the
    remaining providers.
    """

    def __init__(self) -> None:
        self._log = get_logger("vcs_update.rounds")

    def run(
        self,
        plans: list[ProviderPlan],
        registry: ContinuationRegistry,
        progress: ProgressSink,
        cancel: CancellationToken,
        number: int,
    ) -> RoundResult:
        set_round(number)
        set_state("ROUND")
        result = RoundResult(number=number)
        total = len(plans)
        self._log.info("round_start", providers=total)

        for processed, plan in enumerate(plans, start=1):
            if cancel.is_cancelled:
                result.cancelled = True
                self._log.info("provider_skipped_cancelled", skipped=[p.provider_id for p in plans[processed - 1 :]])
                break

            set_provider(plan.provider_id)
            session = self._run_provider(plan, registry, progress, cancel, result.updated_files)
            registry.put(plan.provider_id, session.continuation)

            result.sessions.append(session)
            result.updated_files.merge(session.updated_files)
            result.errors.extend(session.errors)
            progress.set_fraction(processed / total)

            if session.cancelled:
                result.cancelled = True
                remaining = [p.provider_id for p in plans[processed:]]
                if remaining:
                    self._log.info("provider_skipped_cancelled", skipped=remaining)
                break

        set_provider(None)
        self._log.info(
            "round_done",
            sessions=len(result.sessions),
            changed_files=len(result.updated_files),
            errors=len(result.errors),
            cancelled=result.cancelled,
        )
        return result

    def _run_provider(
        self,
        plan: ProviderPlan,
        registry: ContinuationRegistry,
        progress: ProgressSink,
        cancel: CancellationToken,
        round_files: UpdatedFiles,
    ) -> ProviderSession:
        t0 = time.perf_counter()
        try:
            plan.environment.fill_groups(round_files)
            session = plan.environment.update(plan.roots, registry.get(plan.provider_id), progress=progress, cancel=cancel)
        except CancellationSignal:
            self._log.info("provider_update_cancelled", provider_id=plan.provider_id)
            return ProviderSession(provider_id=plan.provider_id, cancelled=True)
        except ProviderOperationError as e:
            e.provider_id = e.provider_id or plan.provider_id
            self._log.warning("provider_update_failed", provider_id=plan.provider_id, error=str(e))
            return ProviderSession(provider_id=plan.provider_id, errors=[e], continuation=NO_MORE_WORK)
        except Exception as e:  # noqa: BLE001
            self._log.exception("provider_update_failed", provider_id=plan.provider_id)
            error = ProviderOperationError(f"{type(e).__name__}: {e}", provider_id=plan.provider_id)
            error.__cause__ = e
            return ProviderSession(provider_id=plan.provider_id, errors=[error], continuation=NO_MORE_WORK)

        for err in session.errors:
            err.provider_id = err.provider_id or plan.provider_id

        self._log.info(
            "provider_update_done",
            provider_id=plan.provider_id,
            latency_ms=round((time.perf_counter() - t0) * 1000, 2),
            changed_files=len(session.updated_files),
            errors=len(session.errors),
            cancelled=session.cancelled,
            pending=session.has_pending_work,
        )
        return session
