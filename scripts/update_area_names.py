"""
Re-apply area names to an existing processed_data.json (reload, modify, resave).
Sources come from AREA_REFERENCE_SOURCES in config/settings.py, in order; later sources win.
Extra ZIP-keyed files can be appended:  python scripts/update_area_names.py --zip-csv "Zip Code Reference.csv" \
    --zip-column "ZIP Code" --name-column City --county-column County
"""
import argparse
import logging
import os
import sys

ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
sys.path.insert(0, ROOT)

from dotenv import load_dotenv

load_dotenv(os.path.join(ROOT, ".env"))

from config.settings import AREA_REFERENCE_SOURCES, SNAPSHOT_PATH
from zipmarket.models.csv_loader import CsvParseError
from zipmarket.models.dataset_store import DatasetStore, SnapshotWriteError
from zipmarket.services.area_names import AreaNameResolver, update_area_names


def build_sources(args) -> list:
    sources = list(AREA_REFERENCE_SOURCES)
    for path in args.zip_csv or []:
        source = {"kind": "zip", "path": path, "zip_column": args.zip_column, "name_columns": args.name_column}
        if args.county_column:
            source["county_column"] = args.county_column
        sources.append(source)
    return sources


def main(argv=None) -> int:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(message)s")
    parser = argparse.ArgumentParser(description="Update areaName on every record in the snapshot.")
    parser.add_argument("--snapshot", default=SNAPSHOT_PATH, help="Snapshot JSON path")
    parser.add_argument("--zip-csv", action="append", help="Extra ZIP-keyed reference CSV (repeatable)")
    parser.add_argument("--zip-column", default="zip")
    parser.add_argument("--name-column", action="append", default=None,
                        help="Label column(s), first non-empty wins (repeatable)")
    parser.add_argument("--county-column", default=None)
    args = parser.parse_args(argv)
    if not args.name_column:
        args.name_column = ["neighborhood", "borough", "post_office"]

    store = DatasetStore(args.snapshot)
    records = store.load()
    if records is None:
        print(f"No snapshot at {args.snapshot}. Run scripts/build_snapshot.py first.", file=sys.stderr)
        return 1

    resolver = AreaNameResolver()
    try:
        resolver.load_sources(build_sources(args))
    except CsvParseError as e:
        print(f"Reference file error: {e}", file=sys.stderr)
        return 1

    print("Updating processed data with area names...")
    updated = update_area_names(records, resolver)
    try:
        store.save(records)
    except SnapshotWriteError as e:
        print(f"Save failed: {e}", file=sys.stderr)
        return 2
    print(f"Successfully updated {updated} area names")
    return 0


if __name__ == "__main__":
    sys.exit(main())
