"""
Area-name resolution for ZIP codes and the enrichment pass over the snapshot.

Resolution order for a ZIP:
    1. direct reference table (ZIP-keyed CSVs, later sources overwrite earlier ones)
    2. municipality reference joined through a ZIP <-> municipality crosswalk
    3. curated specific mapping (config/area_names.json "specific")
    4. 3-digit prefix heuristic ("<Region> Area", config/area_names.json "prefixes")
    5. None -> caller uses the "Unknown Area" placeholder

ZIPs are normalized the same way on both sides (see utils.helpers.normalize_zip).
"""

import json
import logging
from typing import Any, Dict, List, Optional

from zipmarket.models.csv_loader import load_rows
from zipmarket.utils.helpers import normalize_zip

logger = logging.getLogger(__name__)


def load_static_tables(path: Optional[str] = None) -> Dict[str, Dict[str, str]]:
    """Read the specific-mapping and prefix tables from the JSON data asset."""
    if path is None:
        from config.settings import AREA_NAMES_FILE
        path = AREA_NAMES_FILE
    with open(path, encoding="utf-8") as f:
        data = json.load(f)
    return {
        "specific": {str(k): str(v) for k, v in data.get("specific", {}).items()},
        "prefixes": {str(k): str(v) for k, v in data.get("prefixes", {}).items()},
    }


class AreaNameResolver:
    """
    Maps ZIP codes to human-readable area labels.
    Reference tables are loaded from CSVs; static tables come from the JSON asset.
    """

    def __init__(
        self,
        specific_mappings: Optional[Dict[str, str]] = None,
        prefix_regions: Optional[Dict[str, str]] = None,
    ):
        if specific_mappings is None or prefix_regions is None:
            tables = load_static_tables()
            if specific_mappings is None:
                specific_mappings = tables["specific"]
            if prefix_regions is None:
                prefix_regions = tables["prefixes"]
        self.specific_mappings = dict(specific_mappings)
        self.prefix_regions = dict(prefix_regions)
        self.zip_table: Dict[str, str] = {}
        # lowercased municipality -> {"municipality", "county"}
        self.municipalities: Dict[str, Dict[str, str]] = {}
        # zip -> lowercased municipality
        self.crosswalk: Dict[str, str] = {}
        self._warned_inert = False

    # ---- loading ----

    def load_zip_reference(
        self,
        path: str,
        zip_column: str = "zip",
        name_columns: Optional[List[str]] = None,
        county_column: Optional[str] = None,
    ) -> int:
        """
        Load a ZIP-keyed reference CSV. The label is the first non-empty of `name_columns`;
        with `county_column`, it becomes "<Name>, <County> County". Returns rows loaded.
        """
        name_columns = name_columns or ["neighborhood", "borough", "post_office"]
        loaded = 0
        for row in load_rows(path):
            zip_code = normalize_zip(row.get(zip_column, ""))
            name = next((row[c] for c in name_columns if row.get(c)), "")
            if not zip_code or not name:
                continue
            county = row.get(county_column, "") if county_column else ""
            self.zip_table[zip_code] = f"{name}, {county} County" if county else name
            loaded += 1
        logger.info("Loaded %d ZIP codes from %s", loaded, path)
        return loaded

    def load_municipality_reference(
        self,
        path: str,
        municipality_column: str = "MUNICIPALITY_NAME_COMMON",
        county_column: str = "COUNTY_NAME_COMMON",
    ) -> int:
        """Load a municipality-keyed table. Unusable for ZIP lookups until a crosswalk is loaded."""
        loaded = 0
        for row in load_rows(path):
            municipality = row.get(municipality_column, "")
            county = row.get(county_column, "")
            if municipality and county:
                self.municipalities[municipality.lower()] = {"municipality": municipality, "county": county}
                loaded += 1
        logger.info("Loaded %d municipalities from %s", loaded, path)
        return loaded

    def load_crosswalk(self, path: str, zip_column: str = "zip", municipality_column: str = "municipality") -> int:
        loaded = 0
        for row in load_rows(path):
            zip_code = normalize_zip(row.get(zip_column, ""))
            municipality = row.get(municipality_column, "")
            if zip_code and municipality:
                self.crosswalk[zip_code] = municipality.lower()
                loaded += 1
        logger.info("Loaded %d ZIP <-> municipality pairs from %s", loaded, path)
        return loaded

    def load_sources(self, sources: Optional[List[Dict[str, Any]]] = None, skip_missing: bool = True) -> None:
        """
        Load an ordered list of reference sources (see AREA_REFERENCE_SOURCES in settings).
        Missing files are skipped with a warning unless skip_missing is False.
        """
        if sources is None:
            from config.settings import AREA_REFERENCE_SOURCES
            sources = AREA_REFERENCE_SOURCES
        for source in sources:
            kind = source.get("kind", "zip")
            path = source["path"]
            try:
                if kind == "zip":
                    self.load_zip_reference(
                        path,
                        zip_column=source.get("zip_column", "zip"),
                        name_columns=source.get("name_columns"),
                        county_column=source.get("county_column"),
                    )
                elif kind == "municipality":
                    self.load_municipality_reference(path)
                elif kind == "crosswalk":
                    self.load_crosswalk(path)
                else:
                    raise ValueError(f"Unknown reference source kind: {kind}")
            except FileNotFoundError:
                if not skip_missing:
                    raise
                logger.warning("Reference source not found, skipping: %s", path)

    # ---- resolution ----

    def resolve_by_direct_table(self, zip_code: str) -> Optional[str]:
        return self.zip_table.get(zip_code)

    def resolve_by_municipality(self, zip_code: str) -> Optional[str]:
        """Crosswalk ZIP -> municipality -> "<Municipality>, <County> County"."""
        if self.municipalities and not self.crosswalk:
            if not self._warned_inert:
                logger.warning(
                    "%d municipality entries loaded without a ZIP crosswalk; they cannot answer ZIP lookups",
                    len(self.municipalities),
                )
                self._warned_inert = True
            return None
        key = self.crosswalk.get(zip_code)
        if key is None or key not in self.municipalities:
            return None
        entry = self.municipalities[key]
        return f"{entry['municipality']}, {entry['county']} County"

    def resolve_by_specific_mapping(self, zip_code: str) -> Optional[str]:
        return self.specific_mappings.get(zip_code)

    def resolve_by_prefix_heuristic(self, zip_code: str) -> Optional[str]:
        region = self.prefix_regions.get(str(zip_code)[:3])
        return f"{region} Area" if region else None

    def resolve(self, zip_code: str) -> Optional[str]:
        """First hit in priority order, or None."""
        zip_code = normalize_zip(zip_code)
        if not zip_code:
            return None
        for resolver in (
            self.resolve_by_direct_table,
            self.resolve_by_municipality,
            self.resolve_by_specific_mapping,
            self.resolve_by_prefix_heuristic,
        ):
            name = resolver(zip_code)
            if name:
                return name
        return None


def update_area_names(records: List[Dict[str, Any]], resolver: AreaNameResolver) -> int:
    """
    Full scan over records (mutated in place). A resolved name always overwrites the stored one;
    records with no resolution keep their name, or get the placeholder if they have none.
    Returns the number of records whose areaName changed.
    """
    from config.settings import UNKNOWN_AREA
    updated = 0
    for i, record in enumerate(records):
        old_name = record.get("areaName")
        new_name = resolver.resolve(record.get("zipCode", "")) or old_name or UNKNOWN_AREA
        record["areaName"] = new_name
        if new_name != old_name:
            updated += 1
            logger.info('Updated %s: "%s" -> "%s"', record.get("zipCode"), old_name, new_name)
        if i % 50 == 0:
            logger.debug("Processed %d/%d records", i + 1, len(records))
    logger.info("Updated area names on %d of %d records", updated, len(records))
    return updated
