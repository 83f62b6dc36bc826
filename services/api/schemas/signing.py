"""
Pydantic schemas for the signing page requests.
Field names on the wire are the camelCase names the signing page sends.
"""
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field


class KeyboardSignature(BaseModel):
    """Signature typed on the keyboard."""
    text: Optional[str] = Field(None, description="Typed signature text")
    font: Optional[str] = Field(None, description="DancingScript-Regular or BarlowSemiCondensed-Regular")


class SignRequest(BaseModel):
    """
    Body of /api/sign and /api/pdf-config.

    Everything is optional at the schema level; required fields are checked
    by core.validation so a missing name is a 400 with a readable message,
    not a 422.
    """
    model_config = ConfigDict(populate_by_name=True)

    full_name: Optional[str] = Field(None, alias="fullName")
    email: Optional[str] = None
    location: Optional[str] = None
    date: Optional[str] = Field(None, description="DD.MM.YYYY, defaults to today")

    signature: Optional[str] = Field(None, description="Drawn contract signature (data URI)")
    contract_keyboard_signature: Optional[KeyboardSignature] = Field(
        None, alias="contractKeyboardSignature"
    )

    withdrawal_accepted: bool = Field(False, alias="withdrawalAccepted")
    withdrawal_signature: Optional[str] = Field(
        None, alias="withdrawalSignature", description="Drawn withdrawal signature (data URI)"
    )
    withdrawal_keyboard_signature: Optional[KeyboardSignature] = Field(
        None, alias="withdrawalKeyboardSignature"
    )

    pdf_id: Optional[str] = Field(None, alias="pdfId", description="Id returned by /api/pdf-upload")


class UploadResponse(BaseModel):
    id: str
    pdfUrl: str
    signUrl: str


class SignResponse(BaseModel):
    pdfUrl: str
    id: Optional[str] = None
