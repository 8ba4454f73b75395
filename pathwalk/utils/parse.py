"""
Utility functions to parse and coerce values from environment variables and
settings files.
"""
from typing import Any


def as_bool(v: Any) -> bool | None:
    """Helper converts various values to bool."""
    if v is None:
        return None
    if isinstance(v, bool):
        return v
    if isinstance(v, str):
        s = v.strip().lower()
        if s in {'1', 'true', 'yes', 'on'}:
            return True
        if s in {'0', 'false', 'no', 'off', 'null'}:
            return False
    if isinstance(v, (int, float)) and v in {0, 1}:
        return v != 0
    raise ValueError(f"Expected bool-like value, got {type(v).__name__}: {v!r}")


def as_choice(v: Any, choices: set[str] | frozenset[str], default: str) -> str:
    """Helper normalizes a string option, falling back to `default` when unset."""
    if v is None:
        return default
    s = str(v).strip().lower()
    if s == "":
        return default
    if s not in choices:
        raise ValueError(f"Expected one of {sorted(choices)}, got {v!r}")
    return s
