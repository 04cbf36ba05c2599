"""
Pytest configuration and shared fixtures.
"""

import pytest
import sys
import os

# Add project root to path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))


@pytest.fixture(scope="session")
def project_root():
    """Return the project root directory."""
    return os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))


@pytest.fixture
def write_csv(tmp_path):
    """Write text to a CSV under tmp_path and return its path."""
    def _write(name: str, text: str) -> str:
        path = tmp_path / name
        path.write_text(text, encoding="utf-8")
        return str(path)
    return _write


@pytest.fixture
def sample_records():
    """Small enriched dataset covering nulls, a commercial ZIP and ties."""
    return [
        {"zipCode": "10001", "deliveryType": "Standard", "netMV": 1000.0, "orderCount": 50,
         "population": 21000, "marketPenetration": 0.238095, "areaName": "Chelsea"},
        {"zipCode": "10002", "deliveryType": "Express", "netMV": 300.0, "orderCount": 150,
         "population": 75000, "marketPenetration": 0.2, "areaName": "Lower East Side"},
        {"zipCode": "10155", "deliveryType": "Standard", "netMV": 50.0, "orderCount": 200,
         "population": 0, "marketPenetration": None, "areaName": "Midtown (Commercial)"},
        {"zipCode": "07030", "deliveryType": "Standard", "netMV": 900.0, "orderCount": 120,
         "population": 60000, "marketPenetration": 0.2, "areaName": "hoboken, Hudson County"},
        {"zipCode": "99999", "deliveryType": "Express", "netMV": 0.0, "orderCount": 0,
         "population": None, "marketPenetration": None, "areaName": "Unknown Area"},
    ]


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )
