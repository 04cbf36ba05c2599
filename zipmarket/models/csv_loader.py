"""
Loads delimited files into ordered row mappings (column -> string).
Everything is read as text so ZIP codes keep their leading zeros; no schema is enforced.
"""

import os
from typing import Dict, List

import pandas as pd


class CsvParseError(ValueError):
    """Malformed CSV framing (e.g. an unbalanced quote)."""


def load_rows(path: str, sep: str = ",") -> List[Dict[str, str]]:
    """
    Read `path` and return one dict per row, in file order.
    Raises FileNotFoundError if the file is missing, CsvParseError on malformed framing.
    """
    if not os.path.isfile(path):
        raise FileNotFoundError(f"CSV not found at {path}")
    try:
        df = pd.read_csv(
            path,
            sep=sep,
            dtype=str,
            keep_default_na=False,
            skipinitialspace=True,
            encoding="utf-8-sig",
        )
    except pd.errors.EmptyDataError:
        return []
    except pd.errors.ParserError as e:
        raise CsvParseError(f"Malformed CSV {path}: {e}") from e
    df.columns = [str(c).strip() for c in df.columns]
    if df.empty:
        return []
    # short rows come back as NaN even with keep_default_na=False
    df = df.fillna("").apply(lambda col: col.str.strip())
    return df.to_dict(orient="records")
