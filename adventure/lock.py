from __future__ import annotations

from contextlib import contextmanager
from uuid import uuid4

import redis

DEFAULT_LOCK_TTL_MS = 30_000
# Headroom over the narration timeout for the redis round-trips around it.
LOCK_MARGIN_S = 15.0


def lock_ttl_ms(narration_timeout_s: float) -> int:
    """TTL for a lock held across one narration call."""

    return max(DEFAULT_LOCK_TTL_MS, int((narration_timeout_s + LOCK_MARGIN_S) * 1000))


@contextmanager
def session_lock(*, r: redis.Redis, session_id: str, ttl_ms: int = DEFAULT_LOCK_TTL_MS):
    """Per-session lock so two requests never mutate one player's state at once.

    Callers that narrate while holding it pass `lock_ttl_ms(timeout)` so the lock
    outlives the call. Contention is reported, not waited on: the caller gets
    "Session is busy".
    """

    key = f"lock:session:{session_id}"
    token = uuid4().hex
    acquired = r.set(key, token, nx=True, px=ttl_ms)
    if not acquired:
        raise ValueError("Session is busy")
    try:
        yield
    finally:
        # Only release a lock we still hold; it may have expired and been re-taken.
        if r.get(key) == token:
            r.delete(key)
