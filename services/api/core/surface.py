# services/api/core/surface.py
"""
In-memory document the composer draws on.

Each touched page gets a transparent overlay drawn with fpdf2 in the page's
own size. On save the overlays are merged onto the template pages with pypdf
and written as an incremental update, so the original bytes stay an
unchanged prefix of the result.
"""
from __future__ import annotations

import io
import logging
from typing import Dict, Protocol, Set

from fpdf import FPDF
from fpdf.errors import FPDFException
from PIL import Image
from pypdf import PdfReader, PdfWriter, Transformation
from pypdf.errors import PyPdfError

from core.errors import CompositionError
from core.fonts import FontHandle

logger = logging.getLogger(__name__)


class PageSurface(Protocol):
    """
    What the renderers need from a page.
    Coordinates are PDF points, origin bottom-left; `y` of text is the baseline.
    """

    width: float
    height: float

    def draw_text(self, text: str, x: float, y: float, *, font: FontHandle, size: float) -> None:
        ...

    def draw_image(self, png_bytes: bytes, x: float, y: float, width: float, height: float) -> None:
        ...


class OverlaySurface:
    """fpdf2-backed overlay for one template page."""

    def __init__(self, width: float, height: float):
        self.width = width
        self.height = height

        self._pdf = FPDF(orientation="P", unit="pt", format=(width, height))
        self._pdf.set_margins(0, 0, 0)
        self._pdf.set_auto_page_break(auto=False)
        self._pdf.add_page()
        self._registered: Set[str] = set()

    def _use_font(self, font: FontHandle, size: float) -> None:
        if not font.is_builtin and font.family not in self._registered:
            self._pdf.add_font(font.family, "", font.path)
            self._registered.add(font.family)
        self._pdf.set_font(font.family, size=size)

    def draw_text(self, text: str, x: float, y: float, *, font: FontHandle, size: float) -> None:
        self._use_font(font, size)
        self._pdf.set_text_color(0, 0, 0)
        try:
            # fpdf2 measures from the top edge
            self._pdf.text(x, self.height - y, text)
        except FPDFException as e:
            raise CompositionError(f"Cannot draw text with font {font.family}: {e}") from e

    def draw_image(self, png_bytes: bytes, x: float, y: float, width: float, height: float) -> None:
        image = Image.open(io.BytesIO(png_bytes))
        # Stretched to the box; the block rectangle defines the aspect.
        self._pdf.image(image, x=x, y=self.height - (y + height), w=width, h=height)

    def to_pdf_bytes(self) -> bytes:
        return bytes(self._pdf.output())


class SignableDocument:
    """A loaded template plus the overlays drawn on it so far."""

    def __init__(self, pdf_bytes: bytes):
        try:
            self._reader = PdfReader(io.BytesIO(pdf_bytes))
            self.page_count = len(self._reader.pages)
        except (PyPdfError, ValueError) as e:
            raise CompositionError(f"Template is not a readable PDF: {e}") from e
        self._overlays: Dict[int, OverlaySurface] = {}

    def surface(self, page_index: int) -> OverlaySurface:
        """
        Overlay for `page_index`, created on first use.

        The overlay spans the MediaBox and its origin is the box's lower-left
        corner. Coordinates are in unrotated page space; /Rotate is not applied.

        Raises:
            CompositionError: if the index is outside the document.
        """
        if not (0 <= page_index < self.page_count):
            raise CompositionError(
                f"Page index {page_index} out of range (document has {self.page_count} pages)"
            )
        if page_index not in self._overlays:
            box = self._reader.pages[page_index].mediabox
            self._overlays[page_index] = OverlaySurface(float(box.width), float(box.height))
        return self._overlays[page_index]

    def save(self) -> bytes:
        """Merge overlays onto their pages and return the updated PDF bytes."""
        writer = PdfWriter(self._reader, incremental=True)
        for page_index, overlay in sorted(self._overlays.items()):
            overlay_page = PdfReader(io.BytesIO(overlay.to_pdf_bytes())).pages[0]
            box = self._reader.pages[page_index].mediabox
            offset = Transformation().translate(float(box.left), float(box.bottom))
            writer.pages[page_index].merge_transformed_page(overlay_page, offset)

        out = io.BytesIO()
        writer.write(out)
        logger.info(f"Composed document saved ({len(self._overlays)} page(s) annotated)")
        return out.getvalue()
