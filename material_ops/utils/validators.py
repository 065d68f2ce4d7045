# utils/validators.py

def non_empty(text) -> bool:
    """
    True if `text` is not None/empty after stripping whitespace.
    """
    return bool(text and str(text).strip())


def same_text(a, b) -> bool:
    """Case-insensitive, whitespace-trimmed equality (site names, usernames)."""
    return str(a or "").strip().lower() == str(b or "").strip().lower()


# ---- Numeric parsing ----

def try_parse_float(x):
    """
    Best-effort parse to float.

    Returns:
        (ok: bool, value: float|None)
    """
    try:
        return True, float(x)
    except (TypeError, ValueError):
        return False, None


def parse_float(x) -> float:
    """
    Strict parse to float; raises ValueError with a clear message on failure.
    """
    ok, val = try_parse_float(x)
    if not ok:
        raise ValueError(f"Could not parse '{x}' as a number.")
    return val  # type: ignore[return-value]


def try_parse_quantity(x):
    """
    Parse a whole-number quantity ("5", 5, 5.0).

    Returns:
        (ok: bool, value: int|None). Fractions and text are rejected.
    """
    if isinstance(x, bool):
        return False, None
    ok, val = try_parse_float(x)
    if not ok or val is None or val != int(val):
        return False, None
    return True, int(val)


def is_non_negative_number(x) -> bool:
    """
    True iff x parses to a float and value >= 0.
    """
    ok, val = try_parse_float(x)
    return bool(ok and val is not None and val >= 0)


def is_strictly_positive_number(x) -> bool:
    """
    True iff x parses to a float and value > 0.
    """
    ok, val = try_parse_float(x)
    return bool(ok and val is not None and val > 0)
