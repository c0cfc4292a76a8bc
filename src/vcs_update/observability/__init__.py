from __future__ import annotations

from .context import bind_chain, set_provider, set_round, set_state
from .logging import configure_logging, get_logger

__all__ = ["bind_chain", "configure_logging", "get_logger", "set_provider", "set_round", "set_state"]
