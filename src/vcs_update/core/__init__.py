"""Project core.

This package hosts the stable, provider-agnostic building blocks (config, errors,
shared value types and the changed-file accumulator).
"""

from __future__ import annotations
