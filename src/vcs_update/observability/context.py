from __future__ import annotations

from contextvars import ContextVar


_chain_id: ContextVar[str | None] = ContextVar("chain_id", default=None)
_round: ContextVar[int | None] = ContextVar("round", default=None)
_provider: ContextVar[str | None] = ContextVar("provider", default=None)
_state: ContextVar[str | None] = ContextVar("state", default=None)


def bind_chain(*, chain_id: str) -> None:
    _chain_id.set(chain_id)
    _round.set(None)
    _provider.set(None)
    _state.set(None)


def set_round(number: int) -> None:
    _round.set(number)


def set_provider(provider_id: str | None) -> None:
    _provider.set(provider_id)


def set_state(state: str) -> None:
    _state.set(state)


def snapshot() -> dict[str, object]:
    """Return a snapshot of current observability context for logging."""

    out: dict[str, object] = {}
    if (v := _chain_id.get()) is not None:
        out["chain_id"] = v
    if (v := _round.get()) is not None:
        out["round"] = v
    if (v := _provider.get()) is not None:
        out["provider"] = v
    if (v := _state.get()) is not None:
        out["state"] = v
    return out
