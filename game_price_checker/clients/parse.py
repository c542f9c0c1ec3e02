from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Any


def as_str(value: object) -> str:
    if value is None:
        return ""
    return str(value).strip()


def parse_int(value: object) -> int | None:
    """
    Parse an integer from provider fields that may be numbers or numeric strings.

    - Accepts: int, integral float, digit strings (optionally negative)
    - Rejects: bool, everything else
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if value.is_integer() else None
    if not isinstance(value, str):
        return None
    s = value.strip()
    if s.isdigit() or (s.startswith("-") and s[1:].isdigit()):
        return int(s)
    return None


def parse_decimal(value: object) -> Decimal | None:
    """
    Parse a price into a finite Decimal.

    gg.deals sends prices as strings ("9.99"); numbers are accepted too. Empty strings, null,
    booleans and non-numeric text yield None.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        value = str(value)
    if not isinstance(value, str):
        return None
    s = value.strip()
    if not s:
        return None
    try:
        d = Decimal(s)
    except InvalidOperation:
        return None
    if not d.is_finite():
        return None
    return d


def date_from_epoch_seconds(value: object) -> str | None:
    """Render a unix timestamp (seconds) as an ISO date in UTC; None for missing/invalid."""
    ts = parse_int(value)
    if ts is None or ts <= 0:
        return None
    try:
        return datetime.fromtimestamp(ts, tz=timezone.utc).date().isoformat()
    except (OverflowError, OSError, ValueError):
        return None


def get_list_of_dicts(value: Any) -> list[dict[str, Any]]:
    if not isinstance(value, list):
        return []
    return [v for v in value if isinstance(v, dict)]
