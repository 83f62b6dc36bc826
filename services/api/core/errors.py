"""
Error taxonomy for the contract signer.
Routers translate these into HTTP responses; core code raises them.
"""
from __future__ import annotations

from typing import Optional


class SigningError(Exception):
    """Base class for every domain error raised by the signer."""


class ValidationError(SigningError):
    """A required request field is missing or inconsistent. Client error."""


class LayoutConfigError(SigningError):
    """The layout configuration is incomplete. Fatal at startup."""


class DocumentNotFound(SigningError):
    def __init__(self, doc_id: str):
        super().__init__(f"Document {doc_id} not found")
        self.doc_id = doc_id


class CompositionError(SigningError):
    """
    Drawing a field or signature failed.

    Carries the block (and, when known, the field) so the caller can
    localize the failure.
    """

    def __init__(self, message: str, *, block: Optional[str] = None, field: Optional[str] = None):
        self.reason = message
        self.block = block
        self.field = field
        super().__init__(self._format())

    def _format(self) -> str:
        where = []
        if self.block:
            where.append(f"block={self.block}")
        if self.field:
            where.append(f"field={self.field}")
        if where:
            return f"[{', '.join(where)}] {self.reason}"
        return self.reason

    def with_block(self, block: str) -> "CompositionError":
        """Return the same error tagged with `block` if it has none yet."""
        if self.block:
            return self
        return CompositionError(self.reason, block=block, field=self.field)


class StoreError(SigningError):
    """The record file could not be written or read."""


class BlobError(SigningError):
    """Upload or download of document bytes failed."""


class BlobNotFound(BlobError):
    pass


class BlobPermissionDenied(BlobError):
    pass


class InvalidLocationFormat(BlobError):
    pass


class LocationMissing(BlobError):
    """A stored record has no document location."""

    def __init__(self, doc_id: str):
        super().__init__(f"Document {doc_id} has no stored PDF location")
        self.doc_id = doc_id


class UntrustedBucket(BlobError):
    def __init__(self, bucket: str, expected: str):
        super().__init__(f"Cannot access bucket {bucket}, expected {expected}.")
        self.bucket = bucket
        self.expected = expected


class WebhookError(SigningError):
    """Webhook delivery failed. Logged only, never surfaced."""
