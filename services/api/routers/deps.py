# services/api/routers/deps.py
"""
Shared router helpers: DI accessors for app.state and the mapping from
domain errors to HTTP responses.
"""
from __future__ import annotations

import logging
from typing import Optional

from fastapi import Header, HTTPException, Request, status

from core.errors import (
    BlobError,
    BlobNotFound,
    BlobPermissionDenied,
    CompositionError,
    DocumentNotFound,
    InvalidLocationFormat,
    LocationMissing,
    SigningError,
    StoreError,
    UntrustedBucket,
    ValidationError,
)
from core.signing import SigningService
from core.webhook import WebhookNotifier

logger = logging.getLogger(__name__)


# ---- DI helpers (used by routers/*) ----

def get_signing_service(request: Request) -> SigningService:
    return request.app.state.signing_service


def get_notifier(request: Request) -> WebhookNotifier:
    return request.app.state.webhook_notifier


def require_api_key(request: Request, x_api_key: Optional[str] = Header(None)) -> None:
    """Reject requests without the configured x-api-key header."""
    expected = request.app.state.settings.api_key
    if not x_api_key or not expected or x_api_key != expected:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")


def to_http_exception(exc: SigningError, *, context: str) -> HTTPException:
    """
    Translate a domain error into the HTTP error returned to the caller.
    `context` prefixes the message for composition failures.
    """
    if isinstance(exc, ValidationError):
        return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))

    if isinstance(exc, DocumentNotFound):
        return HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="PDF nicht gefunden oder ungültige ID.",
        )

    if isinstance(exc, CompositionError):
        logger.error(f"{context}: {exc}")
        return HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"{context}: {exc}",
        )

    if isinstance(exc, LocationMissing):
        logger.error(str(exc))
        return HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Interner Serverfehler: PDF-Speicherort nicht gefunden.",
        )

    if isinstance(exc, (InvalidLocationFormat, UntrustedBucket)):
        # Stored locations are written by us; a bad one means tampered data.
        logger.warning(f"Rejected blob location: {exc}")
        return HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Interner Serverfehler: PDF-Speicherort ungültig.",
        )

    if isinstance(exc, BlobNotFound):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))

    if isinstance(exc, BlobPermissionDenied):
        logger.error(str(exc))
        return HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(exc))

    if isinstance(exc, (BlobError, StoreError)):
        logger.error(f"{context}: {exc}")
        return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc))

    logger.error(f"{context}: {exc}")
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc))
