# services/api/adapters/gcs/__init__.py
"""
Google Cloud Storage backend for document bytes.

Authentication is left to the environment (service account on Cloud Run,
GOOGLE_APPLICATION_CREDENTIALS locally). The SDK is blocking, so calls run
in the threadpool.
"""
from __future__ import annotations

import logging
from typing import Any, Optional

from fastapi.concurrency import run_in_threadpool
from google.api_core import exceptions as gcs_exceptions

from core.blob_location import DEFAULT_PUBLIC_HOST, ensure_trusted, format_location, parse_location
from core.errors import BlobError, BlobNotFound, BlobPermissionDenied

logger = logging.getLogger(__name__)


class GcsBlobStorage:
    def __init__(
        self,
        bucket: str,
        make_public: bool = False,
        *,
        public_host: str = DEFAULT_PUBLIC_HOST,
        client: Optional[Any] = None,
    ):
        if not bucket:
            raise ValueError("GCS storage requires GCP_BUCKET_NAME")
        self.bucket = bucket
        self.make_public = make_public
        self.public_host = public_host
        self._client = client

    def _get_client(self):
        """Lazily construct the storage client on first use."""
        if self._client is None:
            from google.cloud import storage

            self._client = storage.Client()
            logger.info("Initialized Google Cloud Storage client.")
        return self._client

    # ========== Upload ==========

    async def upload(self, data: bytes, path: str, content_type: str = "application/pdf") -> str:
        return await run_in_threadpool(self._upload_sync, data, path, content_type)

    def _upload_sync(self, data: bytes, path: str, content_type: str) -> str:
        blob = self._get_client().bucket(self.bucket).blob(path)
        try:
            blob.upload_from_string(data, content_type=content_type)
            logger.info(f"PDF uploaded to gs://{self.bucket}/{path}")

            if self.make_public:
                blob.make_public()
                logger.info(f"PDF made public: {path}")
        except gcs_exceptions.Forbidden as e:
            logger.error(f"Permission denied uploading to bucket {self.bucket}: {e}")
            raise BlobPermissionDenied(f"Permission denied to upload PDF to bucket {self.bucket}.") from e
        except gcs_exceptions.GoogleAPIError as e:
            logger.error(f"ERROR uploading PDF to GCS bucket {self.bucket}: {e}")
            raise BlobError(f"Failed to upload PDF to bucket {self.bucket}.") from e

        return format_location(self.bucket, path, self.make_public, host=self.public_host)

    # ========== Download ==========

    async def download(self, location: str) -> bytes:
        # Parsing and the bucket check happen before anything touches the SDK.
        address = parse_location(location, host=self.public_host)
        try:
            ensure_trusted(address, self.bucket)
        except BlobError:
            logger.warning(f"Attempted download from unexpected bucket: {address.bucket}")
            raise
        return await run_in_threadpool(self._download_sync, address.path, location)

    def _download_sync(self, path: str, location: str) -> bytes:
        blob = self._get_client().bucket(self.bucket).blob(path)
        try:
            contents = blob.download_as_bytes()
        except gcs_exceptions.NotFound as e:
            raise BlobNotFound(f"PDF not found at GCS location: {location}.") from e
        except gcs_exceptions.Forbidden as e:
            raise BlobPermissionDenied(f"Permission denied to download PDF from GCS: {location}.") from e
        except gcs_exceptions.GoogleAPIError as e:
            logger.error(f"ERROR downloading PDF from GCS {location}: {e}")
            raise BlobError(f"Failed to download PDF from GCS: {location}.") from e

        logger.info(f"Downloaded PDF from gs://{self.bucket}/{path}")
        return contents
