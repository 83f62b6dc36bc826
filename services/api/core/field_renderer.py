# services/api/core/field_renderer.py
from __future__ import annotations

from typing import Optional

from core.errors import CompositionError
from core.fonts import FontHandle
from core.surface import PageSurface

LABEL_X = 150
VALUE_X = 250
FONT_SIZE = 12
LINE_SPACING = 25


def ensure_on_page(surface: PageSurface, y: float, *, field: Optional[str] = None) -> None:
    """Raise instead of letting a line fall off the page and get clipped."""
    if y < 0 or y > surface.height:
        raise CompositionError(
            f"Line at y={y} lies outside the page (height {surface.height})",
            field=field,
        )


def render_line(
    surface: PageSurface,
    text: str,
    cursor_y: float,
    *,
    font: FontHandle,
    size: float = FONT_SIZE,
    x: float = LABEL_X,
    field: Optional[str] = None,
) -> float:
    """Draw a single line of text at the label column and return the next cursor."""
    ensure_on_page(surface, cursor_y, field=field)
    try:
        surface.draw_text(text, x, cursor_y, font=font, size=size)
    except CompositionError as e:
        raise CompositionError(e.reason, field=field) from e
    return cursor_y - LINE_SPACING


def render_field(
    surface: PageSurface,
    label_text: str,
    value_text: str,
    cursor_y: float,
    *,
    font: FontHandle,
    field: Optional[str] = None,
) -> float:
    """
    Draw `label_text` and `value_text` side by side on one line.

    No wrapping: a long value simply runs to the right.

    Returns:
        The cursor for the next line (`cursor_y - LINE_SPACING`).
    """
    ensure_on_page(surface, cursor_y, field=field)
    try:
        surface.draw_text(label_text, LABEL_X, cursor_y, font=font, size=FONT_SIZE)
        surface.draw_text(value_text, VALUE_X, cursor_y, font=font, size=FONT_SIZE)
    except CompositionError as e:
        raise CompositionError(e.reason, field=field) from e
    return cursor_y - LINE_SPACING
