"""
Run the full pipeline and write processed_data.json so the API starts instantly.
Run once after putting data.csv in data/:  python scripts/build_snapshot.py [--csv PATH] [--force]
Calls the census API once per ZIP (set CENSUS_API_KEY in .env).
"""
import argparse
import logging
import os
import sys

ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
sys.path.insert(0, ROOT)

from dotenv import load_dotenv

load_dotenv(os.path.join(ROOT, ".env"))

from config.settings import INPUT_CSV, SNAPSHOT_PATH
from zipmarket.models.csv_loader import CsvParseError
from zipmarket.models.dataset_store import DatasetStore, SnapshotWriteError
from zipmarket.services.pipeline import run_pipeline
from zipmarket.services.population_service import PopulationService
from zipmarket.services.query_service import compute_stats
from zipmarket.utils.helpers import format_percent


def main(argv=None) -> int:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(message)s")
    parser = argparse.ArgumentParser(description="Build the enriched ZIP snapshot from the raw CSV.")
    parser.add_argument("--csv", default=INPUT_CSV, help="Delivery/order CSV keyed by ZIP_CODE")
    parser.add_argument("--out", default=SNAPSHOT_PATH, help="Snapshot JSON path")
    parser.add_argument("--force", action="store_true", help="Rebuild even if the snapshot exists")
    args = parser.parse_args(argv)

    store = DatasetStore(args.out)
    if store.exists() and not args.force:
        print(f"Snapshot already exists at {args.out}; use --force to rebuild.")
        return 0

    print(f"Building snapshot from {args.csv} ...")
    try:
        records = run_pipeline(args.csv, PopulationService(), store)
    except (FileNotFoundError, CsvParseError) as e:
        print(f"Input error: {e}", file=sys.stderr)
        return 1
    except SnapshotWriteError as e:
        print(f"Save failed: {e}", file=sys.stderr)
        return 2

    stats = compute_stats(records)
    print(f"Done. {len(records)} records written to {args.out}")
    if stats:
        print(f"  Overall market penetration: {format_percent(stats['overallMarketPenetration'])}")
        print(f"  ZIP codes with population data: {stats['zipCodesWithPopulationData']}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
