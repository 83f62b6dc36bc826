"""
JSON file persistence for the document record store.
One file holding a map of document id -> record row.
Single writer process; callers serialize access (see stores.document_store).
"""
import json
import logging
from typing import Any, Dict
from pathlib import Path

logger = logging.getLogger(__name__)


class JsonRecordFile:
    """
    JSON file-based record persistence.
    Uses a temp file + atomic rename so a crash never leaves a half-written map.
    """

    def __init__(self, path: str):
        """
        Args:
            path: Location of the record file (parent dirs are created on first save)
        """
        self.path = Path(path)

    def load(self) -> Dict[str, Dict[str, Any]]:
        """Read and parse the record file; missing file means an empty store."""
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError:
            logger.info(f"{self.path.name} not found, starting with an empty store.")
            return {}

        if not isinstance(data, dict):
            raise ValueError(f"{self.path} does not contain a JSON object")
        return data

    def save(self, data: Dict[str, Dict[str, Any]]) -> None:
        """Write the whole map atomically."""
        self.path.parent.mkdir(parents=True, exist_ok=True)

        # Write to temporary file first
        tmp_file = self.path.with_suffix(".tmp")
        with open(tmp_file, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, ensure_ascii=False, default=str)

        # Atomic rename
        tmp_file.replace(self.path)
