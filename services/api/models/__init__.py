from __future__ import annotations

from .document import DocumentRecord, RequesterFields
from .field_set import FieldSet, today_string
from .signature import Absent, Drawn, FontChoice, SignaturePayload, Typed

__all__ = [
    "DocumentRecord",
    "RequesterFields",
    "FieldSet",
    "today_string",
    "Absent",
    "Drawn",
    "FontChoice",
    "SignaturePayload",
    "Typed",
]
