"""
ZIP Market Penetration - Entry point.
Run from project root:  python -m zipmarket.main
Loads processed_data.json if present; otherwise runs the pipeline on data/data.csv first.
"""

import logging
import os
import sys

ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from dotenv import load_dotenv

# Load environment variables from .env before settings are imported
load_dotenv(os.path.join(ROOT, ".env"))


def _setup_logging() -> None:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(message)s")


def main():
    _setup_logging()
    from zipmarket.api.routes import create_app
    from zipmarket.models.csv_loader import CsvParseError
    from zipmarket.models.dataset_store import SnapshotWriteError
    from zipmarket.services.pipeline import load_or_build_dataset
    from zipmarket.services.query_service import compute_stats
    from zipmarket.utils.helpers import format_percent

    try:
        records = load_or_build_dataset()
    except (FileNotFoundError, CsvParseError, SnapshotWriteError, ValueError) as e:
        logging.getLogger("zipmarket").error("Error initializing data: %s", e)
        sys.exit(1)

    app = create_app(records)
    port = int(os.environ.get("PORT", 3000))

    print(f"Server running on http://127.0.0.1:{port}")
    print(f"Dataset loaded with {len(records)} ZIP codes")
    stats = compute_stats(records)
    if stats:
        print(f"Overall market penetration: {format_percent(stats['overallMarketPenetration'])}")
        print(f"Average market penetration: {format_percent(stats['averageMarketPenetration'])}")
    app.run(host="0.0.0.0", port=port, debug=os.environ.get("FLASK_DEBUG", "false").lower() == "true")


if __name__ == "__main__":
    main()
