"""Provider capability contracts and the provider registry."""

from __future__ import annotations

from .base import UpdateEnvironment, VcsProvider
from .progress import CancellationToken, NullProgress, ProgressSink
from .registry import ProviderRegistry

__all__ = [
    "CancellationToken",
    "NullProgress",
    "ProgressSink",
    "ProviderRegistry",
    "UpdateEnvironment",
    "VcsProvider",
]
