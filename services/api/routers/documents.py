# services/api/routers/documents.py
from __future__ import annotations

import logging
from typing import Annotated, Any, Dict, Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile, status

from core.errors import SigningError
from core.signing import SigningService
from core.validation import decode_pdf_data_uri
from routers.deps import get_signing_service, require_api_key, to_http_exception
from schemas.signing import UploadResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["documents"], dependencies=[Depends(require_api_key)])

# ---- DI alias (no default value allowed) ----
Service = Annotated[SigningService, Depends(get_signing_service)]


@router.post("/pdf-upload", response_model=UploadResponse)
async def upload_pdf(
    service: Service,
    pdf: Optional[UploadFile] = File(None),
    base64: Optional[str] = Form(None),
    webhookUrl: Optional[str] = Form(None),
) -> UploadResponse:
    """
    Store a PDF to be signed later.

    Accepts either a multipart file field `pdf` or a `base64` data URI.
    `webhookUrl` carries the requester's vorname / card_id / email as query
    parameters; they are copied onto the record.
    """
    try:
        if pdf is not None:
            pdf_bytes = await pdf.read()
        elif base64:
            pdf_bytes = decode_pdf_data_uri(base64)
        else:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="No PDF file or base64 data provided",
            )

        record = await service.upload_document(pdf_bytes, webhookUrl)
    except SigningError as e:
        raise to_http_exception(e, context="Error processing PDF upload")

    return UploadResponse(id=record.id, pdfUrl=record.blob_location, signUrl=record.sign_path)


@router.get("/documents/{doc_id}")
async def get_document(doc_id: str, service: Service) -> Dict[str, Any]:
    """Return the stored record for an uploaded or signed document."""
    try:
        record = service.store.get(doc_id)
    except SigningError as e:
        raise to_http_exception(e, context="Error reading document")
    return record.to_api()
