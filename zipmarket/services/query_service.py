"""
Read side of the dataset: filtered/sorted views for /api/data and summary stats for /api/stats.
Neither function mutates the records it is given.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

import numpy as np
import pandas as pd

from zipmarket.models.records import mv_per_order
from zipmarket.utils.helpers import parse_bool, parse_optional_float, round6

SORT_ORDERS = ("asc", "desc")


class QueryValidationError(ValueError):
    """A filter or sort parameter could not be parsed."""


@dataclass
class QueryParams:
    zip_code: Optional[str] = None
    area_name: Optional[str] = None
    min_penetration: Optional[float] = None
    max_penetration: Optional[float] = None
    min_orders: Optional[float] = None
    max_orders: Optional[float] = None
    min_population: Optional[float] = None
    max_population: Optional[float] = None
    hide_commercial: bool = True
    sort_by: Optional[str] = None
    sort_order: str = "asc"
    raw: Dict[str, Any] = field(default_factory=dict)


def parse_query_params(args: Mapping[str, Any]) -> QueryParams:
    """Build QueryParams from query-string args. Raises QueryValidationError on bad values."""
    raw = {k: args.get(k) for k in args.keys()}
    try:
        params = QueryParams(
            zip_code=(args.get("zipCode") or "").strip() or None,
            area_name=(args.get("areaName") or "").strip() or None,
            min_penetration=parse_optional_float(args.get("minPenetration"), "minPenetration"),
            max_penetration=parse_optional_float(args.get("maxPenetration"), "maxPenetration"),
            min_orders=parse_optional_float(args.get("minOrders"), "minOrders"),
            max_orders=parse_optional_float(args.get("maxOrders"), "maxOrders"),
            min_population=parse_optional_float(args.get("minPopulation"), "minPopulation"),
            max_population=parse_optional_float(args.get("maxPopulation"), "maxPopulation"),
            hide_commercial=parse_bool(args.get("hideCommercial"), default=True, name="hideCommercial"),
            sort_by=(args.get("sortBy") or "").strip() or None,
            sort_order=(args.get("sortOrder") or "asc").strip().lower(),
            raw=raw,
        )
    except ValueError as e:
        raise QueryValidationError(str(e)) from e
    if params.sort_order not in SORT_ORDERS:
        raise QueryValidationError(f"Invalid value for 'sortOrder': {args.get('sortOrder')!r} (use asc or desc)")
    return params


def _numeric(df: pd.DataFrame, column: str) -> pd.Series:
    if column not in df.columns:
        return pd.Series(np.nan, index=df.index)
    return pd.to_numeric(df[column], errors="coerce")


def _filter_mask(df: pd.DataFrame, params: QueryParams) -> pd.Series:
    """All filters ANDed together."""
    mask = pd.Series(True, index=df.index)
    population = _numeric(df, "population")
    penetration = _numeric(df, "marketPenetration")
    orders = _numeric(df, "orderCount").fillna(0)

    if params.hide_commercial:
        mask &= ~population.eq(0)
    if params.zip_code:
        zips = df["zipCode"].fillna("").astype(str) if "zipCode" in df.columns else pd.Series("", index=df.index)
        mask &= zips.str.contains(params.zip_code, regex=False)
    if params.area_name:
        names = df["areaName"].fillna("").astype(str) if "areaName" in df.columns else pd.Series("", index=df.index)
        mask &= names.str.lower().str.contains(params.area_name.lower(), regex=False)
    if params.min_penetration is not None:
        mask &= penetration.notna() & (penetration >= params.min_penetration)
    if params.max_penetration is not None:
        mask &= penetration.notna() & (penetration <= params.max_penetration)
    if params.min_orders is not None:
        mask &= orders >= params.min_orders
    if params.max_orders is not None:
        mask &= orders <= params.max_orders
    if params.min_population is not None:
        mask &= population.notna() & (population >= params.min_population)
    if params.max_population is not None:
        mask &= population.notna() & (population <= params.max_population)
    return mask


def _sort_key(values: pd.Series) -> pd.Series:
    """Lowercased strings, natural numbers; nulls stay NaN so na_position applies."""
    non_null = values.dropna()
    if non_null.empty:
        return values
    if non_null.map(lambda v: isinstance(v, str)).all():
        return values.str.lower()
    numeric = pd.to_numeric(values, errors="coerce")
    if numeric.notna().sum() == len(non_null):
        return numeric
    return values.where(values.isna(), values.astype(str).str.lower())


def sort_rows(rows: List[Dict[str, Any]], sort_by: str, sort_order: str = "asc") -> List[Dict[str, Any]]:
    """
    Stable sort on one field. Nulls go last when ascending and first when descending;
    rows with equal keys keep their input order.
    """
    ascending = sort_order != "desc"
    values = pd.Series([row.get(sort_by) for row in rows], dtype=object)
    order = _sort_key(values).sort_values(
        ascending=ascending,
        kind="stable",
        na_position="last" if ascending else "first",
    ).index
    return [rows[i] for i in order]


def query_records(records: List[Dict[str, Any]], params: QueryParams) -> Dict[str, Any]:
    """
    Filter, add mvPerOrder, optionally sort. Returns {data, total, filters}.
    Output rows are copies; the stored records are left untouched.
    """
    if records:
        df = pd.DataFrame(records)
        mask = _filter_mask(df, params)
        selected = np.flatnonzero(mask.to_numpy())
    else:
        selected = []
    rows = [dict(records[i], mvPerOrder=mv_per_order(records[i])) for i in selected]
    if params.sort_by and rows:
        rows = sort_rows(rows, params.sort_by, params.sort_order)
    return {"data": rows, "total": len(rows), "filters": params.raw}


def compute_stats(records: List[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    """
    Summary over the full dataset. None when there are no records
    or no record has a market penetration.
    """
    if not records:
        return None
    df = pd.DataFrame(records)
    penetration = _numeric(df, "marketPenetration").dropna()
    if penetration.empty:
        return None
    total_orders = int(_numeric(df, "orderCount").fillna(0).sum())
    total_population = int(_numeric(df, "population").fillna(0).sum())
    overall = (total_orders / total_population) * 100 if total_population > 0 else None
    return {
        "totalZipCodes": len(df),
        "zipCodesWithPopulationData": int(penetration.size),
        "totalOrders": total_orders,
        "totalPopulation": total_population,
        "averageMarketPenetration": round6(penetration.mean()),
        "maxMarketPenetration": round6(penetration.max()),
        "minMarketPenetration": round6(penetration.min()),
        "overallMarketPenetration": round6(overall),
    }
