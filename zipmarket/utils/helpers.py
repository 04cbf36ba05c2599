"""
Utility functions for data processing and common operations.
Handles lenient numeric coercion of CSV cells, ZIP normalization, rounding, and query-string parsing.
"""

import math
from typing import Any, Optional


def to_float(value: Any, default: float = 0.0) -> float:
    """Parse a CSV cell as float; blanks, garbage and non-finite values become `default`."""
    if value is None:
        return default
    try:
        parsed = float(str(value).strip())
    except ValueError:
        return default
    if not math.isfinite(parsed):
        return default
    return parsed


def to_int(value: Any, default: int = 0) -> int:
    """
    Parse a CSV cell as int. Accepts "12", " 12 ", "12.0" and "12.9" (truncated, like parseInt).
    Anything else becomes `default`.
    """
    parsed = to_float(value, default=math.nan)
    if math.isnan(parsed):
        return default
    return int(parsed)


def round6(value: Optional[float]) -> Optional[float]:
    """Round to 6 decimals; None stays None."""
    if value is None:
        return None
    return round(float(value), 6)


def parse_optional_float(raw: Optional[str], name: str) -> Optional[float]:
    """Query-string number. Empty/missing -> None, invalid -> ValueError naming the parameter."""
    if raw is None or str(raw).strip() == "":
        return None
    try:
        value = float(raw)
    except (TypeError, ValueError):
        raise ValueError(f"Invalid number for '{name}': {raw!r}")
    if not math.isfinite(value):
        raise ValueError(f"Invalid number for '{name}': {raw!r}")
    return value


def parse_bool(raw: Optional[str], default: bool, name: str = "value") -> bool:
    """'true'/'1'/'yes' -> True, 'false'/'0'/'no' -> False, missing -> default."""
    if raw is None or str(raw).strip() == "":
        return default
    text = str(raw).strip().lower()
    if text in ("true", "1", "yes"):
        return True
    if text in ("false", "0", "no"):
        return False
    raise ValueError(f"Invalid boolean for '{name}': {raw!r}")


def format_percent(value: Optional[float]) -> str:
    """Formats a penetration value for display (6 decimals)."""
    if value is None:
        return "n/a"
    return f"{value:.6f}%"


def normalize_zip(value: Any) -> str:
    """Strip a ZIP code and left-pad all-digit values to 5 digits ("7030" -> "07030")."""
    text = str(value if value is not None else "").strip()
    if text.isdigit() and len(text) < 5:
        return text.zfill(5)
    return text
