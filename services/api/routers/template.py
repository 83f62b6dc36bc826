# services/api/routers/template.py
from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Response

from core.errors import SigningError
from core.signing import SigningService
from routers.deps import get_signing_service, to_http_exception

logger = logging.getLogger(__name__)

router = APIRouter(tags=["template"])


@router.get("/template")
async def get_template(service: Annotated[SigningService, Depends(get_signing_service)]) -> Response:
    """Serve the unsigned contract template for preview."""
    try:
        template_bytes = service.load_template()
    except SigningError as e:
        raise to_http_exception(e, context="Error serving template PDF")
    return Response(content=template_bytes, media_type="application/pdf")
