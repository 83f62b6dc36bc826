"""
Validation utilities for the contract signer.
Runs before any composition work so bad requests never touch a document.
"""
import base64
import binascii
import urllib.parse
from typing import Optional

from core.errors import ValidationError
from models.document import RequesterFields
from models.field_set import FieldSet, today_string
from schemas.signing import KeyboardSignature, SignRequest

MISSING_FIELDS_MSG = "Alle Felder müssen ausgefüllt werden."
MISSING_WITHDRAWAL_MSG = "Unterschrift für das Erlöschen des Widerrufsrechts fehlt."

PDF_MAGIC = b"%PDF-"


def _filled(value: Optional[str]) -> bool:
    return bool(value and value.strip())


def _has_typed(sig: Optional[KeyboardSignature]) -> bool:
    return sig is not None and _filled(sig.text)


def require_fields(req: SignRequest) -> None:
    """
    fullName, email and location must be present and non-blank.

    Raises:
        ValidationError
    """
    if not (_filled(req.full_name) and _filled(req.email) and _filled(req.location)):
        raise ValidationError(MISSING_FIELDS_MSG)


def validate_withdrawal(req: SignRequest) -> None:
    """
    An accepted withdrawal waiver needs its own signature, drawn or typed.

    Raises:
        ValidationError
    """
    if not req.withdrawal_accepted:
        return
    if not (_filled(req.withdrawal_signature) or _has_typed(req.withdrawal_keyboard_signature)):
        raise ValidationError(MISSING_WITHDRAWAL_MSG)


def validate_sign_request(req: SignRequest, *, require_contract_signature: bool = False) -> None:
    """Run all request checks in order. Raises ValidationError on the first failure."""
    require_fields(req)
    if require_contract_signature and not (
        _filled(req.signature) or _has_typed(req.contract_keyboard_signature)
    ):
        raise ValidationError(MISSING_FIELDS_MSG)
    validate_withdrawal(req)


def build_field_set(req: SignRequest, *, timezone: str = "Europe/Berlin") -> FieldSet:
    """Call after validate_sign_request."""
    return FieldSet(
        full_name=req.full_name.strip(),
        email=req.email.strip(),
        location=req.location.strip(),
        date=req.date.strip() if _filled(req.date) else today_string(timezone),
    )


def parse_requester_fields(webhook_url: Optional[str]) -> RequesterFields:
    """
    Pull vorname, card_id and email out of the query string of the webhook
    URL the uploader submitted. Missing parameters stay None.
    """
    if not _filled(webhook_url):
        return RequesterFields()

    parsed = urllib.parse.urlparse(webhook_url.strip())
    if not parsed.scheme or not parsed.netloc:
        raise ValidationError(f"Invalid webhookUrl: {webhook_url}")

    params = urllib.parse.parse_qs(parsed.query)

    def first(name: str) -> Optional[str]:
        values = params.get(name) or []
        return values[0] if values and values[0] else None

    return RequesterFields(
        vorname=first("vorname"),
        card_id=first("card_id"),
        email=first("email"),
    )


def decode_pdf_data_uri(data: str) -> bytes:
    """
    Decode a base64 PDF (data URI or bare base64) from an upload form.

    Raises:
        ValidationError: if the payload is not base64 or not a PDF.
    """
    raw = (data or "").strip()
    if raw.startswith("data:"):
        header, sep, raw = raw.partition(",")
        if not sep or ";base64" not in header:
            raise ValidationError("base64 field is not a base64 data URI")

    try:
        pdf_bytes = base64.b64decode("".join(raw.split()), validate=True)
    except (binascii.Error, ValueError) as e:
        raise ValidationError(f"base64 field is not valid base64: {e}") from e

    ensure_pdf(pdf_bytes)
    return pdf_bytes


def ensure_pdf(data: bytes) -> None:
    """
    Raises:
        ValidationError: if `data` does not start with a PDF header.
    """
    if not data or data.lstrip()[:5] != PDF_MAGIC:
        raise ValidationError("Uploaded file is not a PDF")
