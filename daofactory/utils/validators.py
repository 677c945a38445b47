import re
from typing import Any


def clean_str(val: Any, max_len: int | None = 255) -> str | None:
    """
    Collapse whitespace, trim, enforce max length. Returns None if empty after cleaning.
    Non-string JSON values (numbers, bools) are rejected as None.
    max_len=None leaves the length alone so the caller can reject instead of cut.
    """
    if val is None or not isinstance(val, str):
        return None
    s = re.sub(r"\s+", " ", val).strip()
    if not s:
        return None
    return s[:max_len] if max_len else s


def clean_identity(val: Any) -> str | None:
    """Addresses are opaque: trim the ends, never rewrite or cut the inside."""
    if val is None or not isinstance(val, str):
        return None
    return val.strip() or None


def clean_text(val: Any, max_len: int = 10000) -> str | None:
    """Like clean_str but keeps inner newlines (descriptions)."""
    if val is None or not isinstance(val, str):
        return None
    s = val.strip()
    if not s:
        return None
    return s[:max_len]


def to_int(value: Any, default: int | None = None) -> int | None:
    """Coerce JSON numbers / numeric strings to int. Bools and fractions are not ints."""
    if value is None or value == "" or isinstance(value, bool):
        return default
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if value.is_integer() else default
    try:
        return int(str(value).strip())
    except (TypeError, ValueError):
        return default


def clamp(value: int, lo: int, hi: int) -> int:
    return max(lo, min(hi, value))
