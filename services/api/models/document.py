from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Optional


def _utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass
class RequesterFields:
    """Identity fields passed along in the upload's webhook URL. All optional."""
    vorname: Optional[str] = None
    card_id: Optional[str] = None
    email: Optional[str] = None


@dataclass
class DocumentRecord:
    """
    Domain model for an uploaded document.

    Stored in the record file under its id, in the same key layout the
    signing page and downstream automation already read:
      pdfUrl, signUrl, webhookUrl, vorname, card_id, email
    plus the optional signedPdfUrl / signedAt once the document is signed.
    """
    id: str
    blob_location: str
    sign_path: str
    webhook_target: str
    requester: RequesterFields = field(default_factory=RequesterFields)
    created_at: str = field(default_factory=_utc_now)

    signed_blob_location: Optional[str] = None
    signed_at: Optional[str] = None

    def validate(self) -> None:
        """
        Raises ValueError if any invariant is broken.
        """
        if not self.id:
            raise ValueError("id must not be empty")
        if not self.blob_location:
            raise ValueError("blob_location must not be empty")

    # --------------------
    # Conversions - record file
    # --------------------
    @classmethod
    def from_storage(cls, doc_id: str, row: Dict[str, Any]) -> "DocumentRecord":
        """
        Build a record from a stored row as-is. A row without pdfUrl still
        loads; it only fails when someone tries to sign it.
        """
        return cls(
            id=doc_id,
            blob_location=row.get("pdfUrl") or "",
            sign_path=row.get("signUrl") or f"/sign/{doc_id}",
            webhook_target=row.get("webhookUrl") or "",
            requester=RequesterFields(
                vorname=row.get("vorname") or None,
                card_id=row.get("card_id") or None,
                email=row.get("email") or None,
            ),
            created_at=row.get("createdAt") or "",
            signed_blob_location=row.get("signedPdfUrl") or None,
            signed_at=row.get("signedAt") or None,
        )

    def to_storage(self) -> Dict[str, Any]:
        row: Dict[str, Any] = {
            "pdfUrl": self.blob_location,
            "signUrl": self.sign_path,
            "webhookUrl": self.webhook_target,
            "vorname": self.requester.vorname,
            "card_id": self.requester.card_id,
            "email": self.requester.email,
            "createdAt": self.created_at,
        }
        if self.signed_blob_location:
            row["signedPdfUrl"] = self.signed_blob_location
            row["signedAt"] = self.signed_at
        return row

    # --------------------
    # Conversions - API
    # --------------------
    def to_api(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "pdfUrl": self.blob_location,
            "signUrl": self.sign_path,
            "vorname": self.requester.vorname,
            "card_id": self.requester.card_id,
            "email": self.requester.email,
            "createdAt": self.created_at,
            "signedPdfUrl": self.signed_blob_location,
            "signedAt": self.signed_at,
        }
