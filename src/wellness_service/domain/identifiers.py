"""Prefixed identifiers shared with the browser client (sessions, invites)."""
from __future__ import annotations

import secrets
import string
import time

_BASE36 = string.digits + string.ascii_lowercase


def random_base36(length: int = 9) -> str:
    return "".join(secrets.choice(_BASE36) for _ in range(length))


def prefixed_id(prefix: str, now_ms: int | None = None) -> str:
    """Build ``{prefix}-{epoch ms}-{9 base36 chars}``."""
    millis = int(time.time() * 1000) if now_ms is None else now_ms
    return f"{prefix}-{millis}-{random_base36()}"


def new_session_id(now_ms: int | None = None) -> str:
    return prefixed_id("session", now_ms)


def new_invite_code(now_ms: int | None = None) -> str:
    return prefixed_id("invite", now_ms)
