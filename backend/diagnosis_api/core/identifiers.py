"""Identifiers — UUID / CUID format checks and diagnosis id generation.

Invariants:
    - is_uuid accepts the 8-4-4-4-12 hex form only (no braces, no urn: prefix)
    - is_cuid accepts "c" followed by >= 8 characters that are neither
      whitespace nor "-" (case-insensitive)
    - new_diagnosis_id() always satisfies is_cuid and is 25 characters long
    - Ids generated in one process sort by creation time, then by counter
"""

import os
import re
import secrets
import threading
import time

_UUID_RE = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$",
    re.IGNORECASE,
)
_CUID_RE = re.compile(r"^c[^\s-]{8,}$", re.IGNORECASE)

_BASE36 = "0123456789abcdefghijklmnopqrstuvwxyz"
_BLOCK = 4
_COUNTER_SPACE = 36 ** _BLOCK

_counter_lock = threading.Lock()
_counter = secrets.randbelow(_COUNTER_SPACE)


def is_uuid(value: str) -> bool:
    return bool(_UUID_RE.match(value))


def is_cuid(value: str) -> bool:
    return bool(_CUID_RE.match(value))


def _to_base36(number: int) -> str:
    if number == 0:
        return "0"
    digits = []
    while number:
        number, rem = divmod(number, 36)
        digits.append(_BASE36[rem])
    return "".join(reversed(digits))


def _pad(text: str, size: int) -> str:
    return text.rjust(size, "0")[-size:]


def _next_count() -> int:
    global _counter
    with _counter_lock:
        _counter = (_counter + 1) % _COUNTER_SPACE
        return _counter


def _fingerprint() -> str:
    pid = _pad(_to_base36(os.getpid()), 2)
    host = sum(ord(ch) for ch in os.uname().nodename) if hasattr(os, "uname") else 0
    return pid + _pad(_to_base36(host + 36), 2)


_FINGERPRINT = _fingerprint()


def new_diagnosis_id() -> str:
    """Generate a collision-resistant id: c + time(8) + counter(4) + host(4) + random(8)."""
    timestamp = _pad(_to_base36(int(time.time() * 1000)), 8)
    counter = _pad(_to_base36(_next_count()), _BLOCK)
    random_block = "".join(secrets.choice(_BASE36) for _ in range(2 * _BLOCK))
    return f"c{timestamp}{counter}{_FINGERPRINT}{random_block}"
