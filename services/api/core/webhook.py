# services/api/core/webhook.py
from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

import httpx

from core.errors import WebhookError
from models.document import RequesterFields

logger = logging.getLogger(__name__)


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def build_signed_payload(
    pdf_url: str,
    *,
    signed_by: Optional[Dict[str, str]] = None,
    requester: Optional[RequesterFields] = None,
    withdrawal_accepted: Optional[bool] = None,
) -> Dict[str, Any]:
    """
    Body posted downstream after a successful signing:
      {status, pdfUrl, signedBy?, vorname?, card_id?, email?, withdrawalAccepted?, timestamp}
    """
    payload: Dict[str, Any] = {"status": "signed", "pdfUrl": pdf_url}
    if signed_by is not None:
        payload["signedBy"] = signed_by
    if requester is not None:
        payload["vorname"] = requester.vorname
        payload["card_id"] = requester.card_id
        payload["email"] = requester.email
    if withdrawal_accepted is not None:
        payload["withdrawalAccepted"] = withdrawal_accepted
    payload["timestamp"] = _timestamp()
    return payload


class WebhookNotifier:
    """
    Fire-and-forget delivery of signing events.
    Failures are logged, never retried and never raised to the caller.
    """

    def __init__(self, url: str, timeout: float = 10.0, *, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.url = url
        self.timeout = timeout
        self._transport = transport

    async def _post(self, url: str, payload: Dict[str, Any]) -> None:
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                resp = await client.post(url, json=payload)
        except httpx.HTTPError as e:
            raise WebhookError(f"Error sending webhook: {e}") from e

        if resp.status_code >= 400:
            raise WebhookError(f"Webhook failed: {resp.status_code} {resp.reason_phrase}")

    async def notify(self, payload: Dict[str, Any], url: Optional[str] = None) -> bool:
        """
        Post `payload` to `url` (default: the configured URL).
        Returns True if the webhook accepted it.
        """
        target = url or self.url
        if not target:
            logger.info("No webhook URL configured, skipping notification")
            return False
        try:
            await self._post(target, payload)
        except WebhookError as e:
            logger.error(str(e))
            return False

        logger.info(f"Webhook delivered: status={payload.get('status')}")
        return True
