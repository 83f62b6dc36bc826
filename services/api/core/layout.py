# services/api/core/layout.py
"""
Where each signature block and field label sits in the contract template.

Coordinates are PDF user-space points with the origin at the bottom-left of
the page (the same convention the template was measured in). `start_y` is the
baseline of the block's title line; fields flow downwards from there.
"""
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from core.errors import LayoutConfigError

logger = logging.getLogger(__name__)

CONTRACT_BLOCK = "contractSignature"
WITHDRAWAL_BLOCK = "withdrawalSignature"
BLOCK_NAMES = (CONTRACT_BLOCK, WITHDRAWAL_BLOCK)

# Order is part of the document shape reviewers rely on; do not reorder.
FIELD_ORDER = ("fullName", "email", "location", "date")


class BlockLayout(BaseModel):
    model_config = ConfigDict(frozen=True)

    page: int = Field(..., ge=0, description="0-based page index")
    x: float
    y: float
    width: float = Field(..., gt=0)
    height: float = Field(..., gt=0)
    start_y: float = Field(..., description="Baseline of the title line")
    label: str


class FieldLayout(BaseModel):
    model_config = ConfigDict(frozen=True)

    label: str


class LayoutConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    blocks: Dict[str, BlockLayout]
    fields: Dict[str, FieldLayout]

    def block(self, name: str) -> BlockLayout:
        try:
            return self.blocks[name]
        except KeyError:
            raise LayoutConfigError(f"No layout for block '{name}'") from None

    def field(self, name: str) -> FieldLayout:
        try:
            return self.fields[name]
        except KeyError:
            raise LayoutConfigError(f"No layout for field '{name}'") from None


# Measured against templates/DVV-All-Time-Best-Media.pdf (A4).
# Withdrawal waiver is on page 9, the contract signature on page 10.
DEFAULT_LAYOUT: Dict[str, Any] = {
    "blocks": {
        WITHDRAWAL_BLOCK: {
            "page": 8,
            "x": 150,
            "y": 120,
            "width": 200,
            "height": 60,
            "start_y": 420,
            "label": "Erlöschen des Widerrufsrechts",
        },
        CONTRACT_BLOCK: {
            "page": 9,
            "x": 150,
            "y": 120,
            "width": 200,
            "height": 60,
            "start_y": 420,
            "label": "Unterschrift Ausbildungsvertrag",
        },
    },
    "fields": {
        "fullName": {"label": "Name:"},
        "email": {"label": "E-Mail:"},
        "location": {"label": "Ort:"},
        "date": {"label": "Datum:"},
    },
}


def build_layout(data: Dict[str, Any]) -> LayoutConfig:
    """
    Validate raw layout data.

    Raises:
        LayoutConfigError: if the data is malformed or a block/field
            referenced by composition has no entry.
    """
    try:
        layout = LayoutConfig.model_validate(data)
    except PydanticValidationError as e:
        raise LayoutConfigError(f"Invalid layout configuration: {e}") from e

    missing_blocks = [b for b in BLOCK_NAMES if b not in layout.blocks]
    if missing_blocks:
        raise LayoutConfigError(f"Layout is missing blocks: {missing_blocks}")

    missing_fields = [f for f in FIELD_ORDER if f not in layout.fields]
    if missing_fields:
        raise LayoutConfigError(f"Layout is missing fields: {missing_fields}")

    return layout


def load_layout(path: Optional[str] = None) -> LayoutConfig:
    """Load the layout from a JSON file, or the built-in default when no path is given."""
    if not path:
        return build_layout(DEFAULT_LAYOUT)

    layout_file = Path(path)
    try:
        data = json.loads(layout_file.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        raise LayoutConfigError(f"Cannot read layout file {layout_file}: {e}") from e

    logger.info(f"Loaded layout override from {layout_file}")
    return build_layout(data)
