# utils/helpers.py
from datetime import date, datetime, timezone
import logging
from typing import Any, Mapping, Optional, Union

NumberLike = Union[float, int, str]

_log = logging.getLogger(__name__)


def today_str() -> str:
    """Return today's date as ISO string (YYYY-MM-DD)."""
    return date.today().isoformat()


def now_iso() -> str:
    """UTC timestamp in the backend's ISO format (milliseconds, trailing Z)."""
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.%f")[:-3] + "Z"


def parse_iso(value: Optional[str]) -> Optional[datetime]:
    """Parse an ISO date/datetime string; returns None for blanks or junk."""
    if not value:
        return None
    text = str(value).strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        _log.debug("parse_iso: could not parse %r", value)
        return None


def fmt_date(value: Optional[str], *, with_time: bool = False) -> str:
    """'2026-10-19T08:30:00Z' -> '19 Oct 2026' (or '19 Oct 2026, 08:30')."""
    dt = parse_iso(value)
    if dt is None:
        return "N/A"
    return dt.strftime("%d %b %Y, %H:%M" if with_time else "%d %b %Y")


def fmt_money(v: NumberLike, places: int = 2, *, symbol: str = "₹") -> str:
    """
    Format a number as money with thousands separators.
    Unparsable values are shown as zero, matching how bills render missing prices.
    """
    try:
        x = float(v)
    except (TypeError, ValueError):
        _log.debug("fmt_money: failed to parse %r as float", v)
        x = 0.0
    return f"{symbol}{x:,.{places}f}"


def fmt_qty(v: NumberLike) -> str:
    try:
        return f"{float(v):g}"
    except (TypeError, ValueError):
        return str(v)


def field(obj: Any, name: str, default: Any = None) -> Any:
    """
    Read `name` from a mapping or an attribute-style record.
    Lets the pure helpers accept both API dataclasses and plain dicts.
    """
    if isinstance(obj, Mapping):
        return obj.get(name, default)
    return getattr(obj, name, default)
