# services/api/core/fonts.py
"""
Font lookup for typed signatures.

The provider owns the fallback policy: a requested asset that is missing or
unreadable is replaced by the neutral fallback asset, and that one by the
built-in Helvetica. Callers always get a usable handle.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from threading import Lock
from typing import Dict, Optional

from fpdf import FPDF

from models.signature import FontChoice

logger = logging.getLogger(__name__)

BUILTIN_FAMILY = "Helvetica"


@dataclass(frozen=True)
class FontHandle:
    """
    A font that a page surface can draw with.

    `path` is None for the PDF core font, which needs no embedding.
    """
    family: str
    path: Optional[str] = None

    @property
    def is_builtin(self) -> bool:
        return self.path is None


HELVETICA = FontHandle(family=BUILTIN_FAMILY)


class FontProvider:
    def __init__(self, fonts_dir: str):
        self.fonts_dir = Path(fonts_dir)
        self._cache: Dict[FontChoice, Optional[FontHandle]] = {}
        self._lock = Lock()

    def body_font(self) -> FontHandle:
        """Font for labels and field values."""
        return HELVETICA

    def request(self, choice: FontChoice) -> FontHandle:
        """
        Return a handle for `choice`, falling back to the neutral asset and
        then to Helvetica. Never raises for missing or broken assets.
        """
        handle = self._load(choice)
        if handle is not None:
            return handle

        if choice is not FontChoice.FALLBACK:
            logger.warning(f"Font {choice.value} unavailable, using {FontChoice.FALLBACK.value}")
            handle = self._load(FontChoice.FALLBACK)
            if handle is not None:
                return handle

        logger.warning(f"Font {FontChoice.FALLBACK.value} unavailable, using {BUILTIN_FAMILY}")
        return HELVETICA

    def _load(self, choice: FontChoice) -> Optional[FontHandle]:
        with self._lock:
            if choice not in self._cache:
                self._cache[choice] = self._locate(choice)
            return self._cache[choice]

    def _locate(self, choice: FontChoice) -> Optional[FontHandle]:
        font_path = self.fonts_dir / f"{choice.value}.ttf"
        if not font_path.is_file():
            logger.info(f"Font asset not found: {font_path}")
            return None

        # Parse once up front so a corrupt file is caught here and not
        # halfway through drawing a contract.
        try:
            FPDF().add_font(choice.value, "", str(font_path))
        except Exception as e:
            logger.warning(f"Font asset {font_path} could not be loaded: {e}")
            return None

        return FontHandle(family=choice.value, path=str(font_path))
