from __future__ import annotations

import secrets


def new_chain_id() -> str:
    return secrets.token_hex(12)
