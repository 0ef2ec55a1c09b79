"""Redaction for DEBUG logging of EcoCharge request and response bodies.

Login bodies carry the admin password, login responses and dashboard
requests carry the bearer token, and connect bodies carry the vehicle
number. Secrets are replaced outright; vehicle numbers keep their region
segment so traces stay readable.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

_SECRET_KEYS: frozenset[str] = frozenset({"password", "token", "admin_token", "authorization"})
_VEHICLE_KEYS: frozenset[str] = frozenset({"vehicle_number"})

_REDACTED = "<redacted>"
_MAX_DEPTH = 8


def mask_vehicle_number(value: str) -> str:
    """``KA-12-AB-3456`` -> ``KA-**-**-****``."""
    region, sep, rest = value.partition("-")
    if not sep:
        return "*" * len(value)
    return region + sep + "".join(ch if ch == "-" else "*" for ch in rest)


def _redact_entry(key: str, value: Any, max_string: int, depth: int) -> Any:
    name = key.lower()
    if name in _SECRET_KEYS:
        return _REDACTED
    if name in _VEHICLE_KEYS and isinstance(value, str):
        return mask_vehicle_number(value)
    return redact_for_log(value, max_string=max_string, _depth=depth + 1)


def redact_for_log(value: Any, *, max_string: int = 512, _depth: int = 0) -> Any:
    """Return a copy of a decoded JSON body that is safe to log."""
    if _depth > _MAX_DEPTH:
        return "<max-depth>"
    if isinstance(value, str):
        return value if len(value) <= max_string else f"{value[:max_string]}…<truncated>"
    if value is None or isinstance(value, (bool, int, float)):
        return value
    if isinstance(value, Mapping):
        return {str(k): _redact_entry(str(k), v, max_string, _depth) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [redact_for_log(item, max_string=max_string, _depth=_depth + 1) for item in value]
    return repr(value)
