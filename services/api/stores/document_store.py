# services/api/stores/document_store.py
from __future__ import annotations

import logging
from datetime import datetime, timezone
from threading import RLock
from typing import Dict, List

from adapters.base import RecordPersistence
from core.errors import DocumentNotFound, StoreError
from models.document import DocumentRecord

logger = logging.getLogger(__name__)


class DocumentStore:
    """
    Map of document id -> DocumentRecord, backed by a persistence port.

    Lifecycle: construct once per process, `load()` at startup; every
    mutation rewrites the whole map through the port. A single lock
    serializes read-modify-write between concurrent requests in this process.
    """

    def __init__(self, persistence: RecordPersistence):
        self._persistence = persistence
        self._records: Dict[str, DocumentRecord] = {}
        self._lock = RLock()

    # ========== Lifecycle ==========

    def load(self) -> None:
        """
        Read the stored map.

        A single malformed row never blocks startup: non-object rows are
        skipped with a warning, and rows missing a location load and fail
        when signed.

        Raises:
            StoreError: if the backing data exists but cannot be read.
        """
        try:
            rows = self._persistence.load()
        except (OSError, ValueError) as e:
            logger.error(f"CRITICAL: Error loading PDF store on startup: {e}")
            raise StoreError(f"Failed to load document store: {e}") from e

        records: Dict[str, DocumentRecord] = {}
        for doc_id, row in rows.items():
            if not isinstance(row, dict):
                logger.warning(f"Skipping malformed record {doc_id} in PDF store")
                continue
            record = DocumentRecord.from_storage(doc_id, row)
            if not record.blob_location:
                logger.warning(f"Record {doc_id} has no PDF location")
            records[doc_id] = record

        with self._lock:
            self._records = records
        logger.info(f"PDF store loaded successfully ({len(records)} record(s)).")

    def persist(self) -> None:
        """
        Rewrite the whole map.

        Raises:
            StoreError: if the write fails.
        """
        with self._lock:
            rows = {doc_id: rec.to_storage() for doc_id, rec in self._records.items()}
            try:
                self._persistence.save(rows)
            except (OSError, TypeError, ValueError) as e:
                logger.error(f"Error saving PDF store: {e}")
                raise StoreError(f"Failed to persist document store: {e}") from e

    # ========== Records ==========

    def create(self, doc_id: str, record: DocumentRecord) -> None:
        """
        Add a record and persist. On persistence failure the record is
        rolled back, since an unpersisted record could never be found again.
        """
        if record.id != doc_id:
            raise ValueError(f"Record id {record.id} does not match {doc_id}")
        record.validate()

        with self._lock:
            if doc_id in self._records:
                raise ValueError(f"Document {doc_id} already exists")
            self._records[doc_id] = record
            try:
                self.persist()
            except StoreError:
                del self._records[doc_id]
                raise

    def get(self, doc_id: str) -> DocumentRecord:
        """
        Raises:
            DocumentNotFound: if no record exists for `doc_id`.
        """
        with self._lock:
            record = self._records.get(doc_id)
        if record is None:
            raise DocumentNotFound(doc_id)
        return record

    def attach_signed_location(self, doc_id: str, location: str) -> DocumentRecord:
        """
        Record where the signed copy of `doc_id` lives. The original
        location is kept; a later signing replaces the signed location.
        """
        with self._lock:
            record = self.get(doc_id)
            previous = (record.signed_blob_location, record.signed_at)
            record.signed_blob_location = location
            record.signed_at = datetime.now(timezone.utc).isoformat()
            try:
                self.persist()
            except StoreError:
                record.signed_blob_location, record.signed_at = previous
                raise
            return record

    def ids(self) -> List[str]:
        with self._lock:
            return list(self._records)

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)

    def __contains__(self, doc_id: object) -> bool:
        with self._lock:
            return doc_id in self._records
