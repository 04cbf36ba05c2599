"""
JSON snapshot of the enriched dataset.
If the snapshot exists, it is the source of truth and the pipeline is skipped.
"""

import json
import logging
import os
import tempfile
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)


class SnapshotWriteError(OSError):
    """Snapshot could not be written."""


class DatasetStore:
    """Reads and rewrites the whole record list; there is no append mode."""

    def __init__(self, path: Optional[str] = None):
        if path is None:
            from config.settings import SNAPSHOT_PATH
            path = SNAPSHOT_PATH
        self.path = path

    def exists(self) -> bool:
        return os.path.isfile(self.path)

    def load(self) -> Optional[List[Dict[str, Any]]]:
        """Return the stored records, or None when no snapshot exists yet."""
        if not self.exists():
            return None
        with open(self.path, encoding="utf-8") as f:
            records = json.load(f)
        if not isinstance(records, list):
            raise ValueError(f"Snapshot {self.path} does not contain a list of records")
        logger.info("Loaded %d records from %s", len(records), self.path)
        return records

    def save(self, records: List[Dict[str, Any]]) -> str:
        """
        Write all records to a temp file next to the snapshot, then swap it in,
        so readers see either the old snapshot or the new one.
        """
        directory = os.path.dirname(os.path.abspath(self.path))
        tmp_path = None
        try:
            os.makedirs(directory, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(prefix=".snapshot-", suffix=".json", dir=directory)
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(records, f, indent=2, allow_nan=False)
            # mkstemp creates 0600; snapshots are shared with other tools
            os.chmod(tmp_path, 0o644)
            os.replace(tmp_path, self.path)
        except (OSError, ValueError) as e:
            if tmp_path and os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise SnapshotWriteError(f"Could not write snapshot {self.path}: {e}") from e
        logger.info("Saved %d records to %s", len(records), self.path)
        return self.path
