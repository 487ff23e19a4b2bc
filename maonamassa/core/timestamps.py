# maonamassa/core/timestamps.py
"""
Write-path timestamps.

  POST        -> createdAt = updatedAt = now (client values overwritten)
  PUT / PATCH -> updatedAt = now; client-supplied createdAt is dropped
  otherwise   -> payload untouched
"""
import threading
from datetime import datetime, timedelta, timezone
from typing import Any

from fastapi import Body, Request

CREATE_METHODS = {"POST"}
UPDATE_METHODS = {"PUT", "PATCH"}

_lock = threading.Lock()
_last: datetime | None = None


def utcnow_iso() -> str:
    """
    Current UTC instant as an ISO-8601 string.

    Successive calls are strictly increasing inside one process: a clock
    reading that is not after the previous one is moved 1µs past it.
    """
    global _last
    with _lock:
        now = datetime.now(timezone.utc)
        if _last is not None and now <= _last:
            now = _last + timedelta(microseconds=1)
        _last = now
    return now.isoformat(timespec="microseconds").replace("+00:00", "Z")


def apply_timestamps(
    method: str,
    payload: dict[str, Any],
    now: str | None = None,
) -> dict[str, Any]:
    """Return a copy of `payload` stamped according to the HTTP method."""
    method = method.upper()
    stamped = dict(payload)

    if method in CREATE_METHODS:
        now = now or utcnow_iso()
        stamped["createdAt"] = now
        stamped["updatedAt"] = now
    elif method in UPDATE_METHODS:
        stamped.pop("createdAt", None)
        stamped["updatedAt"] = now or utcnow_iso()

    return stamped


def stamped_payload(
    request: Request,
    payload: dict[str, Any] = Body(...),
) -> dict[str, Any]:
    """
    FastAPI dependency: JSON object body with write timestamps applied.

    Usage:

        @router.post("")
        def create(payload: dict = Depends(stamped_payload)):
            ...
    """
    return apply_timestamps(request.method, payload)
