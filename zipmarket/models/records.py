"""
Record layout and per-record metrics.
A record is a plain dict with camelCase keys; that dict is exactly what the snapshot stores.
"""

import math
from typing import Any, Dict, List, Optional, Tuple

from zipmarket.utils.helpers import normalize_zip, round6, to_float, to_int


# (record prefix, CSV day code) for the per-day value/percentage pairs
DAYS: List[Tuple[str, str]] = [
    ("monday", "MON"),
    ("tuesday", "TUE"),
    ("wednesday", "WED"),
    ("thursday", "THU"),
    ("friday", "FRI"),
    ("saturday", "SAT"),
    ("sunday", "SUN"),
]

RECORD_FIELDS = [
    "zipCode", "deliveryType", "netMV", "orderCount", "population", "marketPenetration", "areaName",
] + [f"{day}{suffix}" for day, _ in DAYS for suffix in ("NetMV", "Pct")]


def compute_market_penetration(order_count: Any, population: Optional[int]) -> Optional[float]:
    """(order_count / population) * 100 rounded to 6 decimals; None for a null or zero population."""
    if population is None or population <= 0:
        return None
    value = (to_float(order_count) / population) * 100
    if not math.isfinite(value):
        return None
    return round6(value)


def mv_per_order(record: Dict[str, Any]) -> float:
    order_count = record.get("orderCount") or 0
    if order_count == 0:
        return 0
    return (record.get("netMV") or 0) / order_count


def build_record(row: Dict[str, str], population: Optional[int]) -> Dict[str, Any]:
    """
    Turn one CSV row plus its population into a record.
    Missing or unparsable numeric columns default to 0; areaName is filled by the area-name pass.
    """
    order_count = to_int(row.get("ORDER_COUNT"))
    record: Dict[str, Any] = {
        "zipCode": normalize_zip(row.get("ZIP_CODE")),
        "deliveryType": row.get("DELIVERY_TYPE") or "",
        "netMV": to_float(row.get("NET_MV")),
        "orderCount": order_count,
        "population": population,
        "marketPenetration": compute_market_penetration(order_count, population),
    }
    for day, code in DAYS:
        record[f"{day}NetMV"] = to_float(row.get(f"{code}_NET_MV"))
        record[f"{day}Pct"] = to_float(row.get(f"{code}_MV_PCT"))
    return record
