"""
Pydantic schemas for request/response validation.
"""
from .signing import KeyboardSignature, SignRequest, SignResponse, UploadResponse

__all__ = [
    "KeyboardSignature",
    "SignRequest",
    "SignResponse",
    "UploadResponse",
]
