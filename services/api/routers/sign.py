# services/api/routers/sign.py
from __future__ import annotations

import logging
from typing import Annotated, Any, Dict

from fastapi import APIRouter, BackgroundTasks, Body, Depends

from core.errors import SigningError
from core.signing import SigningService
from core.validation import validate_sign_request
from core.webhook import WebhookNotifier
from routers.deps import get_notifier, get_signing_service, to_http_exception
from schemas.signing import SignRequest, SignResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["sign"])

Service = Annotated[SigningService, Depends(get_signing_service)]
Notifier = Annotated[WebhookNotifier, Depends(get_notifier)]


@router.post("/pdf-config", response_model=SignResponse)
async def sign_template(
    body: Annotated[SignRequest, Body(...)],
    background_tasks: BackgroundTasks,
    service: Service,
    notifier: Notifier,
) -> SignResponse:
    """
    Fill and sign the bundled contract template.
    The result is stored as a new document; the webhook fires after the response.
    """
    try:
        result = await service.sign_template(body)
    except SigningError as e:
        raise to_http_exception(e, context="Fehler beim Einfügen der Unterschrift")

    background_tasks.add_task(notifier.notify, result.webhook_payload, result.webhook_target)
    return SignResponse(pdfUrl=result.pdf_url, id=result.doc_id)


@router.post("/sign")
async def sign_document(
    body: Annotated[SignRequest, Body(...)],
    background_tasks: BackgroundTasks,
    service: Service,
    notifier: Notifier,
) -> Dict[str, Any]:
    """
    Sign an uploaded document (`pdfId`).

    Without a pdfId the request is only validated and echoed back, which the
    signing page uses for a dry run.
    """
    if not body.pdf_id:
        try:
            validate_sign_request(body)
        except SigningError as e:
            raise to_http_exception(e, context="Validierung")
        return {
            "success": True,
            "message": "Signature data received successfully",
            "data": body.model_dump(by_alias=True, exclude={"pdf_id"}),
        }

    try:
        result = await service.sign_document(body)
    except SigningError as e:
        raise to_http_exception(e, context="Fehler beim Einfügen der Unterschrift")

    background_tasks.add_task(notifier.notify, result.webhook_payload, result.webhook_target)
    return {"pdfUrl": result.pdf_url}
