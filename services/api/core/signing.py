# services/api/core/signing.py
"""
Upload and signing flows.

Order inside every flow:
  validate -> resolve signatures -> compose -> upload -> record
Validation and composition errors therefore abort before anything is
stored. Webhook delivery is left to the caller (background task).
"""
from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

from fastapi.concurrency import run_in_threadpool

from adapters.base import BlobStorage
from core.composer import compose_document
from core.errors import CompositionError, LocationMissing, StoreError
from core.fonts import FontProvider
from core.layout import CONTRACT_BLOCK, WITHDRAWAL_BLOCK, LayoutConfig
from core.signature_resolver import resolve_payload
from core.validation import (
    build_field_set,
    ensure_pdf,
    parse_requester_fields,
    validate_sign_request,
)
from core.webhook import build_signed_payload
from models.document import DocumentRecord
from models.signature import SignaturePayload
from schemas.signing import SignRequest
from stores.document_store import DocumentStore

logger = logging.getLogger(__name__)

PDF_CONTENT_TYPE = "application/pdf"


@dataclass
class SigningResult:
    doc_id: str
    pdf_url: str
    webhook_payload: Dict[str, Any]
    webhook_target: Optional[str] = None


def sign_path_for(doc_id: str) -> str:
    return f"/sign/{doc_id}"


class SigningService:
    def __init__(
        self,
        *,
        store: DocumentStore,
        blobs: BlobStorage,
        layout: LayoutConfig,
        fonts: FontProvider,
        template_path: str,
        webhook_url: str,
        timezone: str = "Europe/Berlin",
    ):
        self.store = store
        self.blobs = blobs
        self.layout = layout
        self.fonts = fonts
        self.template_path = Path(template_path)
        self.webhook_url = webhook_url
        self.timezone = timezone

    # ========== Template ==========

    def load_template(self) -> bytes:
        try:
            return self.template_path.read_bytes()
        except OSError as e:
            logger.error(f"Error reading template PDF {self.template_path}: {e}")
            raise CompositionError(f"Template PDF not available: {self.template_path.name}") from e

    # ========== Upload ==========

    async def upload_document(self, pdf_bytes: bytes, webhook_url_field: Optional[str]) -> DocumentRecord:
        """Store an uploaded PDF and create its record."""
        ensure_pdf(pdf_bytes)
        requester = parse_requester_fields(webhook_url_field)

        pdf_id = str(uuid.uuid4())
        pdf_url = await self.blobs.upload(pdf_bytes, f"uploads/uploaded_{pdf_id}.pdf", PDF_CONTENT_TYPE)

        record = DocumentRecord(
            id=pdf_id,
            blob_location=pdf_url,
            sign_path=sign_path_for(pdf_id),
            webhook_target=self.webhook_url,
            requester=requester,
        )
        self.store.create(pdf_id, record)
        logger.info(f"Uploaded document {pdf_id} -> {pdf_url}")
        return record

    # ========== Signing ==========

    def _resolve_payloads(self, req: SignRequest) -> Tuple[SignaturePayload, Optional[SignaturePayload]]:
        contract_typed = req.contract_keyboard_signature
        contract = resolve_payload(
            CONTRACT_BLOCK,
            typed_text=contract_typed.text if contract_typed else None,
            typed_font=contract_typed.font if contract_typed else None,
            drawn=req.signature,
        )

        withdrawal = None
        if req.withdrawal_accepted:
            withdrawal_typed = req.withdrawal_keyboard_signature
            withdrawal = resolve_payload(
                WITHDRAWAL_BLOCK,
                typed_text=withdrawal_typed.text if withdrawal_typed else None,
                typed_font=withdrawal_typed.font if withdrawal_typed else None,
                drawn=req.withdrawal_signature,
            )
        return contract, withdrawal

    async def _compose(self, req: SignRequest, template_bytes: bytes) -> bytes:
        field_set = build_field_set(req, timezone=self.timezone)
        contract, withdrawal = self._resolve_payloads(req)
        return await run_in_threadpool(
            compose_document,
            template_bytes,
            layout=self.layout,
            fonts=self.fonts,
            field_set=field_set,
            contract=contract,
            withdrawal=withdrawal,
        )

    async def sign_template(self, req: SignRequest) -> SigningResult:
        """
        Sign the bundled contract template and record the result as a new
        document.
        """
        validate_sign_request(req, require_contract_signature=True)
        template_bytes = self.load_template()

        pdf_bytes = await self._compose(req, template_bytes)

        doc_id = str(uuid.uuid4())
        pdf_url = await self.blobs.upload(
            pdf_bytes, f"contracts/ausbildungsvertrag_{doc_id}.pdf", PDF_CONTENT_TYPE
        )

        record = DocumentRecord(
            id=doc_id,
            blob_location=pdf_url,
            sign_path=sign_path_for(doc_id),
            webhook_target=self.webhook_url,
        )
        # The record is the only way back to the document, so a failed write surfaces.
        self.store.create(doc_id, record)

        logger.info(f"Template signed as document {doc_id} -> {pdf_url}")
        return SigningResult(
            doc_id=doc_id,
            pdf_url=pdf_url,
            webhook_payload=build_signed_payload(pdf_url),
            webhook_target=record.webhook_target,
        )

    async def sign_document(self, req: SignRequest) -> SigningResult:
        """Sign a previously uploaded document identified by `req.pdf_id`."""
        validate_sign_request(req)
        record = self.store.get(req.pdf_id)
        if not record.blob_location:
            raise LocationMissing(record.id)

        original = await self.blobs.download(record.blob_location)
        pdf_bytes = await self._compose(req, original)

        signed_url = await self.blobs.upload(
            pdf_bytes, f"signed/signed_{record.id}.pdf", PDF_CONTENT_TYPE
        )

        try:
            self.store.attach_signed_location(record.id, signed_url)
        except StoreError as e:
            # The signed PDF exists; the caller still gets its location.
            logger.error(f"Signed {record.id} but could not record location: {e}")

        payload = build_signed_payload(
            signed_url,
            signed_by={
                "name": req.full_name.strip(),
                "email": req.email.strip(),
                "location": req.location.strip(),
            },
            requester=record.requester,
            withdrawal_accepted=req.withdrawal_accepted,
        )
        logger.info(f"Document {record.id} signed -> {signed_url}")
        return SigningResult(
            doc_id=record.id,
            pdf_url=signed_url,
            webhook_payload=payload,
            webhook_target=record.webhook_target or self.webhook_url,
        )
