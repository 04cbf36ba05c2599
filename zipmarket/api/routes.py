"""
API endpoints for ZIP Market Penetration: filtered dataset, summary stats, dashboard login.
"""

import hmac
import logging
import os
import secrets
from typing import Any, Dict, List, Optional

from flask import Flask, jsonify, request, send_from_directory

from zipmarket.services.query_service import (
    QueryValidationError,
    compute_stats,
    parse_query_params,
    query_records,
)

logger = logging.getLogger(__name__)


class DatasetHandle:
    """
    Owns the in-memory dataset served by the API.
    Request handlers only read `records`; a refresh swaps in a new list instead of mutating the old one.
    """

    def __init__(self, records: Optional[List[Dict[str, Any]]] = None):
        self._records: List[Dict[str, Any]] = list(records or [])

    @property
    def records(self) -> List[Dict[str, Any]]:
        return self._records

    def replace(self, records: List[Dict[str, Any]]) -> None:
        self._records = list(records)

    def __len__(self) -> int:
        return len(self._records)


def create_app(
    records: Optional[List[Dict[str, Any]]] = None,
    password: Optional[str] = None,
    static_dir: Optional[str] = None,
) -> Flask:
    """
    Args:
        records: enriched dataset (from the snapshot or the pipeline).
        password: dashboard password for /api/login (defaults to DASHBOARD_PASSWORD).
        static_dir: folder holding index.html for the UI.
    """
    from config import settings
    app = Flask(__name__)
    app.config["DATASET"] = DatasetHandle(records)
    app.config["DASHBOARD_PASSWORD"] = settings.DASHBOARD_PASSWORD if password is None else password
    app.config["STATIC_DIR"] = static_dir or settings.STATIC_DIR

    def _dataset() -> DatasetHandle:
        return app.config["DATASET"]

    @app.route("/api/health", methods=["GET"])
    def health_check() -> tuple:
        return jsonify({
            "status": "healthy",
            "message": "ZIP Market Penetration API is running",
            "records": len(_dataset()),
        }), 200

    @app.route("/api/data", methods=["GET"])
    def get_data() -> tuple:
        """
        Filtered/sorted dataset. Query: zipCode, areaName, minPenetration, maxPenetration,
        minOrders, maxOrders, minPopulation, maxPopulation, hideCommercial (default true),
        sortBy, sortOrder=asc|desc.
        """
        try:
            params = parse_query_params(request.args)
        except QueryValidationError as e:
            return jsonify({"error": str(e)}), 400
        try:
            result = query_records(_dataset().records, params)
            return jsonify(result), 200
        except Exception:
            logger.exception("Error in /api/data")
            return jsonify({"error": "Internal server error"}), 500

    @app.route("/api/stats", methods=["GET"])
    def get_stats() -> tuple:
        """Summary statistics over the full dataset; null when there is nothing to summarize."""
        try:
            return jsonify(compute_stats(_dataset().records)), 200
        except Exception:
            logger.exception("Error in /api/stats")
            return jsonify({"error": "Internal server error"}), 500

    @app.route("/api/login", methods=["POST"])
    def login() -> tuple:
        """
        Toy password gate for the dashboard. Body: { "password": "..." }
        Not a security boundary; the data endpoints are not protected by it.
        """
        try:
            data = request.get_json(silent=True)
            supplied = data.get("password") if isinstance(data, dict) else None
            if not supplied:
                return jsonify({"success": False, "message": "Password required"}), 400
            expected = app.config["DASHBOARD_PASSWORD"]
            if expected and hmac.compare_digest(str(supplied).encode(), expected.encode()):
                return jsonify({
                    "success": True,
                    "token": secrets.token_urlsafe(16),
                    "message": "Authentication successful",
                }), 200
            return jsonify({"success": False, "message": "Invalid password"}), 401
        except Exception:
            logger.exception("Login error")
            return jsonify({"success": False, "message": "Internal server error"}), 500

    @app.route("/", methods=["GET"])
    def index():
        static_dir = app.config["STATIC_DIR"]
        if os.path.isfile(os.path.join(static_dir, "index.html")):
            return send_from_directory(static_dir, "index.html")
        return jsonify({"message": "ZIP Market Penetration API. See /api/data and /api/stats."}), 200

    return app
