# services/api/models/signature.py
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union


class FontChoice(str, Enum):
    """The two font assets a typed signature can be rendered in."""

    DECORATIVE = "DancingScript-Regular"
    FALLBACK = "BarlowSemiCondensed-Regular"

    @classmethod
    def from_request(cls, value: Optional[str]) -> "FontChoice":
        """
        Map the font name sent by the signing page to a choice.
        Anything other than the decorative script font selects the fallback.
        """
        if value and value.strip() == cls.DECORATIVE.value:
            return cls.DECORATIVE
        return cls.FALLBACK


@dataclass(frozen=True)
class Typed:
    """Signature typed on the keyboard, rendered as text in a chosen font."""
    text: str
    font_choice: FontChoice = FontChoice.FALLBACK


@dataclass(frozen=True)
class Drawn:
    """Signature drawn on the signature pad; `image_bytes` is a decoded PNG."""
    image_bytes: bytes

    def __repr__(self) -> str:
        return f"Drawn(<{len(self.image_bytes)} bytes>)"


@dataclass(frozen=True)
class Absent:
    """No signature for this block."""


SignaturePayload = Union[Typed, Drawn, Absent]
