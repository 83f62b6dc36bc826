"""
Adapter interfaces for the contract signer.
Defines the contracts the blob backend and the record file must implement.
"""

from typing import Any, Dict, Protocol


class BlobStorage(Protocol):
    """
    Protocol for the store that holds document bytes.

    This allows swapping Google Cloud Storage for an in-memory fake in tests
    without changing the signing flow.
    """

    bucket: str

    async def upload(self, data: bytes, path: str, content_type: str = "application/pdf") -> str:
        """
        Store `data` under `path` in the configured bucket.

        Returns:
            The blob location (gs:// URI or public https URL).

        Raises:
            BlobError: if the upload fails.
        """
        ...

    async def download(self, location: str) -> bytes:
        """
        Fetch the bytes behind `location`.

        Implementations must parse the location and reject any bucket other
        than the configured one BEFORE contacting the backend.

        Raises:
            InvalidLocationFormat, UntrustedBucket, BlobNotFound,
            BlobPermissionDenied, BlobError
        """
        ...


class RecordPersistence(Protocol):
    """
    Protocol for where the document record map is kept.
    The whole map is read once and rewritten in full on every mutation.
    """

    def load(self) -> Dict[str, Dict[str, Any]]:
        """
        Return the stored map of id -> record row.
        A missing backing file is an empty map, not an error.
        """
        ...

    def save(self, data: Dict[str, Dict[str, Any]]) -> None:
        """
        Replace the stored map with `data`.

        Raises:
            OSError (or backend equivalent) on failure.
        """
        ...
