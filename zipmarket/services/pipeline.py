"""
Initial ETL run: CSV rows -> census population -> metrics -> area names -> snapshot.
"""

import logging
from typing import Any, Dict, List, Optional

from zipmarket.models.csv_loader import load_rows
from zipmarket.models.dataset_store import DatasetStore
from zipmarket.models.records import build_record
from zipmarket.services.area_names import AreaNameResolver, update_area_names
from zipmarket.services.population_service import PopulationService
from zipmarket.utils.helpers import normalize_zip

logger = logging.getLogger(__name__)


def run_pipeline(
    csv_path: str,
    population_service: PopulationService,
    store: DatasetStore,
    resolver: Optional[AreaNameResolver] = None,
) -> List[Dict[str, Any]]:
    """
    Build the enriched dataset from the raw CSV and persist it.
    Raises FileNotFoundError / CsvParseError for bad input and SnapshotWriteError if saving fails.
    """
    rows = load_rows(csv_path)
    logger.info("Loaded %d records from %s", len(rows), csv_path)

    zips = [normalize_zip(row.get("ZIP_CODE")) for row in rows]
    logger.info("Fetching population for %d ZIP codes", len(zips))
    populations = population_service.fetch_all_sync(zips)

    records = [build_record(row, population) for row, population in zip(rows, populations)]

    if resolver is None:
        resolver = AreaNameResolver()
        resolver.load_sources()
    update_area_names(records, resolver)

    store.save(records)
    logger.info("Processing complete. %d records processed.", len(records))
    return records


def load_or_build_dataset(
    store: Optional[DatasetStore] = None,
    csv_path: Optional[str] = None,
    population_service: Optional[PopulationService] = None,
) -> List[Dict[str, Any]]:
    """Snapshot if present; otherwise run the pipeline once."""
    store = store or DatasetStore()
    records = store.load()
    if records is not None:
        return records
    if csv_path is None:
        from config.settings import INPUT_CSV
        csv_path = INPUT_CSV
    logger.info("No snapshot at %s; processing %s for the first time", store.path, csv_path)
    return run_pipeline(csv_path, population_service or PopulationService(), store)
