"""Update orchestration: roots → provider plans → rounds → classified outcome."""

from __future__ import annotations

from .action import ActionResult, Availability, UpdateAction
from .chain import UpdateChain
from .continuation import ContinuationController, ContinuationRegistry, Decision
from .dispatch import ProviderPlan
from .outcome import ChainReport
from .rounds import RoundExecutor, RoundResult

__all__ = [
    "ActionResult",
    "Availability",
    "ChainReport",
    "ContinuationController",
    "ContinuationRegistry",
    "Decision",
    "ProviderPlan",
    "RoundExecutor",
    "RoundResult",
    "UpdateAction",
    "UpdateChain",
]
