# services/api/core/composer.py
from __future__ import annotations

from typing import Optional, Protocol

from core.errors import CompositionError, LayoutConfigError
from core.field_renderer import render_field, render_line
from core.fonts import FontProvider
from core.layout import CONTRACT_BLOCK, FIELD_ORDER, WITHDRAWAL_BLOCK, LayoutConfig
from core.signature_resolver import resolve_and_render
from core.surface import PageSurface, SignableDocument
from models.field_set import FieldSet
from models.signature import SignaturePayload


class ComposableDocument(Protocol):
    page_count: int

    def surface(self, page_index: int) -> PageSurface:
        ...


def compose_block(
    document: ComposableDocument,
    block_name: str,
    *,
    layout: LayoutConfig,
    field_set: FieldSet,
    payload: SignaturePayload,
    fonts: FontProvider,
) -> None:
    """
    Draw one signature block: title, the four fields, then the signature.

    Raises:
        CompositionError: tagged with `block_name`.
    """
    try:
        block = layout.block(block_name)
        surface = document.surface(block.page)
        body_font = fonts.body_font()

        cursor_y = render_line(surface, block.label, block.start_y, font=body_font, field="title")

        values = field_set.as_layout_dict()
        for field_name in FIELD_ORDER:
            cursor_y = render_field(
                surface,
                layout.field(field_name).label,
                values[field_name],
                cursor_y,
                font=body_font,
                field=field_name,
            )

        resolve_and_render(surface, block_name, block, payload, cursor_y, fonts=fonts)

    except CompositionError as e:
        if e.block:
            raise
        raise e.with_block(block_name) from e
    except LayoutConfigError as e:
        raise CompositionError(str(e), block=block_name) from e


def compose_document(
    template_bytes: bytes,
    *,
    layout: LayoutConfig,
    fonts: FontProvider,
    field_set: FieldSet,
    contract: SignaturePayload,
    withdrawal: Optional[SignaturePayload] = None,
) -> bytes:
    """
    Compose both blocks on one loaded document and serialise it once.

    `withdrawal` is None when the requester did not waive the withdrawal
    right; the block is then not drawn at all. Any failure aborts the whole
    document.
    """
    document = SignableDocument(template_bytes)

    if withdrawal is not None:
        compose_block(
            document,
            WITHDRAWAL_BLOCK,
            layout=layout,
            field_set=field_set,
            payload=withdrawal,
            fonts=fonts,
        )

    compose_block(
        document,
        CONTRACT_BLOCK,
        layout=layout,
        field_set=field_set,
        payload=contract,
        fonts=fonts,
    )

    return document.save()
