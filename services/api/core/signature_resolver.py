# services/api/core/signature_resolver.py
"""
Decides how a block is signed and draws that signature.

Precedence when a request carries more than one representation:
  1. typed signature with non-empty text
  2. drawn signature image
  3. nothing
"""
from __future__ import annotations

import base64
import binascii
import io
import logging
from typing import Optional

from PIL import Image, UnidentifiedImageError

from core.errors import CompositionError
from core.field_renderer import FONT_SIZE, render_line
from core.fonts import FontProvider
from core.layout import BlockLayout
from core.surface import PageSurface
from models.signature import Absent, Drawn, FontChoice, SignaturePayload, Typed

logger = logging.getLogger(__name__)

TYPED_LABEL = "Unterschrift per Tastatur:"
DRAWN_LABEL = "Unterschrift Signaturfeld:"

# Typed signatures are drawn larger so they read as a signature (16pt on 12pt body).
TYPED_FONT_SIZE = round(FONT_SIZE * 1.3)


def decode_signature_image(data: str, *, block: Optional[str] = None) -> bytes:
    """
    Decode a signature pad image into PNG bytes.

    Accepts a `data:image/...;base64,` URI or bare base64. Transparent
    pixels are flattened onto white.

    Raises:
        CompositionError: on malformed base64 or an unreadable image.
    """
    raw = (data or "").strip()
    if raw.startswith("data:"):
        header, sep, raw = raw.partition(",")
        if not sep or ";base64" not in header:
            raise CompositionError("Signature image is not a base64 data URI", block=block)

    raw = "".join(raw.split())
    if not raw:
        raise CompositionError("Signature image is empty", block=block)

    try:
        image_bytes = base64.b64decode(raw, validate=True)
    except (binascii.Error, ValueError) as e:
        raise CompositionError(f"Signature image is not valid base64: {e}", block=block) from e

    try:
        image = Image.open(io.BytesIO(image_bytes))
        image.load()
    except (UnidentifiedImageError, OSError, Image.DecompressionBombError) as e:
        raise CompositionError(f"Signature image could not be decoded: {e}", block=block) from e

    if image.mode in ("RGBA", "LA", "P"):
        image = image.convert("RGBA")
        background = Image.new("RGB", image.size, (255, 255, 255))
        background.paste(image, mask=image.split()[3])
        image = background
    elif image.mode != "RGB":
        image = image.convert("RGB")

    out = io.BytesIO()
    image.save(out, format="PNG")
    return out.getvalue()


def resolve_payload(
    block: str,
    *,
    typed_text: Optional[str] = None,
    typed_font: Optional[str] = None,
    drawn: Optional[str] = None,
) -> SignaturePayload:
    """Pick exactly one signature representation for `block`."""
    if typed_text and typed_text.strip():
        return Typed(text=typed_text.strip(), font_choice=FontChoice.from_request(typed_font))
    if drawn:
        return Drawn(image_bytes=decode_signature_image(drawn, block=block))
    return Absent()


def resolve_and_render(
    surface: PageSurface,
    block_name: str,
    block: BlockLayout,
    payload: SignaturePayload,
    cursor_y: float,
    *,
    fonts: FontProvider,
) -> float:
    """
    Draw the signature part of a block starting at `cursor_y`.

    Returns:
        The cursor after the last drawn line (unchanged for Absent).
    """
    body_font = fonts.body_font()

    if isinstance(payload, Typed):
        cursor_y = render_line(surface, TYPED_LABEL, cursor_y, font=body_font)
        signature_font = fonts.request(payload.font_choice)
        return render_line(
            surface,
            payload.text,
            cursor_y,
            font=signature_font,
            size=TYPED_FONT_SIZE,
            field="keyboardSignature",
        )

    if isinstance(payload, Drawn):
        cursor_y = render_line(surface, DRAWN_LABEL, cursor_y, font=body_font)
        try:
            surface.draw_image(payload.image_bytes, block.x, block.y, block.width, block.height)
        except (OSError, ValueError) as e:
            raise CompositionError(
                f"Signature image could not be placed: {e}", block=block_name, field="signature"
            ) from e
        return cursor_y

    if isinstance(payload, Absent):
        return cursor_y

    raise TypeError(f"Unknown signature payload: {payload!r}")
