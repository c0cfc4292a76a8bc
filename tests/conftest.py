from __future__ import annotations

import sys
from pathlib import Path


def pytest_configure() -> None:
    root = Path(__file__).resolve().parents[1]
    src = root / "src"
    if src.exists():
        sys.path.insert(0, str(src))
    # Shared fakes live next to this file.
    sys.path.insert(0, str(Path(__file__).resolve().parent))
