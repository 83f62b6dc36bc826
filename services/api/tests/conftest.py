"""
Shared fixtures for the contract signer tests.

Run with: pytest services/api/tests -v
"""
import base64
import io
import os
import string
import sys
from typing import Any, Dict, List, Optional

import pytest
from fontTools.fontBuilder import FontBuilder
from fontTools.pens.ttGlyphPen import TTGlyphPen
from fpdf import FPDF
from google.api_core import exceptions as gcs_exceptions
from PIL import Image

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from core.fonts import FontProvider  # noqa: E402
from core.layout import load_layout  # noqa: E402
from core.webhook import WebhookNotifier  # noqa: E402
from models.field_set import FieldSet  # noqa: E402
from settings import Settings  # noqa: E402

TEST_BUCKET = "test-bucket"


# ---------- PDF / image builders ----------

def build_pdf(pages: int = 10) -> bytes:
    """A4 document with one line of text per page."""
    pdf = FPDF(orientation="P", unit="pt", format="A4")
    pdf.set_auto_page_break(auto=False)
    for i in range(pages):
        pdf.add_page()
        pdf.set_font("Helvetica", size=14)
        pdf.text(72, 72, f"Vertragsseite {i + 1}")
    return bytes(pdf.output())


def build_png(size=(4, 2), color=(0, 0, 255, 255)) -> bytes:
    image = Image.new("RGBA", size, color)
    out = io.BytesIO()
    image.save(out, format="PNG")
    return out.getvalue()


def png_data_uri(png: Optional[bytes] = None) -> str:
    png = png or build_png(size=(1, 1))
    return "data:image/png;base64," + base64.b64encode(png).decode("ascii")


TEST_FONT_NAME = "SignatureTest-Regular"
TEST_FONT_CHARS = string.ascii_letters + string.digits + " .,-:@"


def build_ttf(path) -> None:
    """Write a small TrueType font where every supported character is a box."""
    glyph_names = {ord(c): f"uni{ord(c):04X}" for c in TEST_FONT_CHARS}
    glyph_order = [".notdef"] + sorted(glyph_names.values())

    pen = TTGlyphPen(None)
    pen.moveTo((100, 0))
    pen.lineTo((100, 700))
    pen.lineTo((500, 700))
    pen.lineTo((500, 0))
    pen.closePath()
    box = pen.glyph()

    fb = FontBuilder(1000, isTTF=True)
    fb.setupGlyphOrder(glyph_order)
    fb.setupCharacterMap(glyph_names)
    fb.setupGlyf({name: box for name in glyph_order})
    fb.setupHorizontalMetrics({name: (600, 100) for name in glyph_order})
    fb.setupHorizontalHeader(ascent=800, descent=-200)
    fb.setupNameTable({
        "familyName": "SignatureTest",
        "styleName": "Regular",
        "uniqueFontIdentifier": TEST_FONT_NAME,
        "fullName": TEST_FONT_NAME,
        "psName": TEST_FONT_NAME,
        "version": "Version 1.0",
    })
    fb.setupOS2(sTypoAscender=800, usWinAscent=800, usWinDescent=200)
    fb.setupPost()
    fb.save(str(path))


@pytest.fixture
def template_pdf() -> bytes:
    return build_pdf(10)


@pytest.fixture
def signature_uri() -> str:
    return png_data_uri()


@pytest.fixture
def layout():
    return load_layout()


@pytest.fixture
def fonts(tmp_path) -> FontProvider:
    """Provider over an empty font directory: every request falls back."""
    fonts_dir = tmp_path / "fonts"
    fonts_dir.mkdir()
    return FontProvider(str(fonts_dir))


@pytest.fixture
def decorative_fonts(tmp_path) -> FontProvider:
    """Provider whose decorative script asset is a real TrueType font."""
    fonts_dir = tmp_path / "ttf-fonts"
    fonts_dir.mkdir()
    build_ttf(fonts_dir / "DancingScript-Regular.ttf")
    return FontProvider(str(fonts_dir))


@pytest.fixture
def field_set() -> FieldSet:
    return FieldSet(full_name="Jane Doe", email="j@x.com", location="Berlin", date="18.10.2026")


# ---------- Recording page surface ----------

class RecordingSurface:
    """PageSurface that records draw calls instead of drawing."""

    def __init__(self, width: float = 595.0, height: float = 842.0):
        self.width = width
        self.height = height
        self.ops: List[Dict[str, Any]] = []

    def draw_text(self, text, x, y, *, font, size):
        self.ops.append({"op": "text", "text": text, "x": x, "y": y, "font": font.family, "size": size})

    def draw_image(self, png_bytes, x, y, width, height):
        self.ops.append({"op": "image", "x": x, "y": y, "width": width, "height": height, "png": png_bytes})

    @property
    def texts(self) -> List[str]:
        return [o["text"] for o in self.ops if o["op"] == "text"]

    @property
    def baselines(self) -> List[float]:
        """Distinct text baselines, top to bottom."""
        seen: List[float] = []
        for o in self.ops:
            if o["op"] == "text" and o["y"] not in seen:
                seen.append(o["y"])
        return seen


class RecordingDocument:
    def __init__(self, page_count: int = 10):
        self.page_count = page_count
        self.surfaces: Dict[int, RecordingSurface] = {}

    def surface(self, page_index: int) -> RecordingSurface:
        from core.errors import CompositionError

        if not (0 <= page_index < self.page_count):
            raise CompositionError(f"Page index {page_index} out of range")
        return self.surfaces.setdefault(page_index, RecordingSurface())


@pytest.fixture
def recording_document() -> RecordingDocument:
    return RecordingDocument()


# ---------- Fake Google Cloud Storage client ----------

class FakeBlob:
    def __init__(self, bucket: "FakeBucket", name: str):
        self.bucket = bucket
        self.name = name

    def upload_from_string(self, data, content_type=None):
        self.bucket.client.calls.append(("upload", self.bucket.name, self.name))
        if self.bucket.client.fail_with is not None:
            raise self.bucket.client.fail_with
        self.bucket.client.objects[(self.bucket.name, self.name)] = bytes(data)

    def make_public(self):
        self.bucket.client.calls.append(("make_public", self.bucket.name, self.name))
        self.bucket.client.public.add((self.bucket.name, self.name))

    def download_as_bytes(self):
        self.bucket.client.calls.append(("download", self.bucket.name, self.name))
        if self.bucket.client.fail_with is not None:
            raise self.bucket.client.fail_with
        key = (self.bucket.name, self.name)
        if key not in self.bucket.client.objects:
            raise gcs_exceptions.NotFound(f"No such object: {self.bucket.name}/{self.name}")
        return self.bucket.client.objects[key]


class FakeBucket:
    def __init__(self, client: "FakeGcsClient", name: str):
        self.client = client
        self.name = name

    def blob(self, name: str) -> FakeBlob:
        return FakeBlob(self, name)


class FakeGcsClient:
    """Stands in for google.cloud.storage.Client; keeps objects in a dict."""

    def __init__(self):
        self.objects: Dict[tuple, bytes] = {}
        self.public: set = set()
        self.calls: List[tuple] = []
        self.fail_with: Optional[Exception] = None

    def bucket(self, name: str) -> FakeBucket:
        return FakeBucket(self, name)


@pytest.fixture
def gcs_client() -> FakeGcsClient:
    return FakeGcsClient()


# ---------- Webhook ----------

class RecordingNotifier(WebhookNotifier):
    def __init__(self):
        super().__init__("https://hooks.example.test/signed")
        self.sent: List[Dict[str, Any]] = []

    async def notify(self, payload, url=None):
        self.sent.append({"url": url or self.url, "payload": payload})
        return True


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


# ---------- Settings ----------

@pytest.fixture
def settings(tmp_path, template_pdf) -> Settings:
    template_file = tmp_path / "template.pdf"
    template_file.write_bytes(template_pdf)
    fonts_dir = tmp_path / "app-fonts"
    fonts_dir.mkdir()
    return Settings(
        gcp_bucket_name=TEST_BUCKET,
        gcs_make_public=False,
        api_key="secret-key",
        pdf_store_path=str(tmp_path / "data" / "pdfStore.json"),
        template_path=str(template_file),
        fonts_dir=str(fonts_dir),
        webhook_url="https://hooks.example.test/signed",
    )
