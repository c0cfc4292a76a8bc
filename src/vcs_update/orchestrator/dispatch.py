from __future__ import annotations

from dataclasses import dataclass

from vcs_update.core.errors import ValidationError
from vcs_update.core.types import OperationKind, Root
from vcs_update.observability import get_logger
from vcs_update.providers import ProviderRegistry, UpdateEnvironment

_log = get_logger("vcs_update.dispatch")


@dataclass(frozen=True, slots=True)
class ProviderPlan:
    provider_id: str
    environment: UpdateEnvironment
    roots: tuple[Root, ...]


def build(roots: list[Root], registry: ProviderRegistry, operation: OperationKind) -> list[ProviderPlan]:
    """Group roots by provider (first-seen order) and canonicalise each group."""

    grouped: dict[str, list[Root]] = {}
    for r in roots:
        grouped.setdefault(r.provider_id, []).append(r)

    plans: list[ProviderPlan] = []
    for provider_id, assigned in grouped.items():
        environment = registry.provider(provider_id).update_environment(operation)
        if environment is None:
            continue

        by_path = {r.path: r for r in assigned}
        covering = environment.compute_minimal_covering_roots([r.path for r in assigned])
        if not covering:
            _log.debug("provider_has_no_roots", provider_id=provider_id)
            continue
        plan_roots = tuple(by_path.get(p) or Root(path=p, provider_id=provider_id, is_directory=True) for p in covering)
        if len(plan_roots) != len(assigned):
            _log.debug(
                "roots_collapsed",
                provider_id=provider_id,
                assigned=len(assigned),
                covering=len(plan_roots),
            )
        plans.append(ProviderPlan(provider_id=provider_id, environment=environment, roots=plan_roots))
    return plans


def validate(plans: list[ProviderPlan]) -> ValidationError | None:
    """Run every provider's option check; the first rejection rejects the whole dispatch.

    User-facing detail has already been surfaced by whoever owns the options UI.
    """

    for plan in plans:
        try:
            ok = plan.environment.validate_options(plan.roots)
        except ValidationError as e:
            e.provider_id = e.provider_id or plan.provider_id
            _log.warning("validation_rejected", provider_id=plan.provider_id, reason=str(e))
            return e

        if not ok:
            _log.warning("validation_rejected", provider_id=plan.provider_id)
            return ValidationError(f"{plan.provider_id}: update options rejected", provider_id=plan.provider_id)
    return None
