"""
Configuration for ZIP Market Penetration.
Input CSVs and reference files live in the data/ folder under project root.
Most values can be overridden from the environment (or a .env file loaded by the entry points).
"""
import os

# Project root (directory containing zipmarket/, config/, data/, etc.)
PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))

# Data folder: place data.csv and the area reference CSVs here
DATA_DIR = os.environ.get("DATA_DIR", os.path.join(PROJECT_ROOT, "data"))

# Delivery/order input keyed by ZIP_CODE
INPUT_CSV = os.environ.get("INPUT_CSV", os.path.join(DATA_DIR, "data.csv"))

# Enriched snapshot; once it exists the app reads it instead of re-running the pipeline
SNAPSHOT_PATH = os.environ.get("SNAPSHOT_PATH", os.path.join(PROJECT_ROOT, "processed_data.json"))

# Static area tables (specific ZIP mappings + 3-digit prefix regions)
AREA_NAMES_FILE = os.path.join(PROJECT_ROOT, "config", "area_names.json")

# Placeholder when no resolver matches
UNKNOWN_AREA = "Unknown Area"

# Ordered area reference sources. Later entries overwrite earlier ones on the same ZIP.
# kind: "zip" (ZIP-keyed table), "municipality" (needs a crosswalk), "crosswalk" (zip <-> municipality)
AREA_REFERENCE_SOURCES = [
    {
        "kind": "zip",
        "path": os.path.join(DATA_DIR, "nyc_zip_borough_neighborhoods_pop.csv"),
        "zip_column": "zip",
        "name_columns": ["neighborhood", "borough", "post_office"],
    },
    {
        "kind": "municipality",
        "path": os.path.join(DATA_DIR, "Municipalities_of_New_Jersey.csv"),
    },
    {
        "kind": "crosswalk",
        "path": os.path.join(DATA_DIR, "nj_zip_municipality_crosswalk.csv"),
    },
    {
        "kind": "zip",
        "path": os.path.join(DATA_DIR, "nj_zip_reference.csv"),
        "zip_column": "ZIP Code",
        "name_columns": ["City"],
        "county_column": "County",
    },
]

# Census population lookup (ACS 5-year total population by ZCTA)
CENSUS_API_KEY = os.environ.get("CENSUS_API_KEY", "")
CENSUS_YEAR = int(os.environ.get("CENSUS_YEAR", 2023))
CENSUS_BASE_URL = "https://api.census.gov/data"
POPULATION_VARIABLE = "B01003_001E"
USER_AGENT = "ZIP-Penetration-Analysis/1.0"
REQUEST_TIMEOUT = 10.0

# Batching: at most BATCH_SIZE concurrent lookups, BATCH_DELAY seconds between batches
BATCH_SIZE = int(os.environ.get("BATCH_SIZE", 10))
BATCH_DELAY = float(os.environ.get("BATCH_DELAY", 0.1))

# Toy login gate for the dashboard (not a security boundary)
DASHBOARD_PASSWORD = os.environ.get("DASHBOARD_PASSWORD", "")

# Static UI (index.html) served at /
STATIC_DIR = os.path.join(PROJECT_ROOT, "static")
