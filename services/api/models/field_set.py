# services/api/models/field_set.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Dict, Optional
from zoneinfo import ZoneInfo

DATE_FORMAT = "%d.%m.%Y"


def today_string(timezone: str = "Europe/Berlin", now: Optional[datetime] = None) -> str:
    """Current date as DD.MM.YYYY in `timezone`."""
    now = now or datetime.now(ZoneInfo(timezone))
    return now.strftime(DATE_FORMAT)


@dataclass(frozen=True)
class FieldSet:
    """
    The text fields printed in every signature block.
    Required values are checked by core.validation before this is built.
    """
    full_name: str
    email: str
    location: str
    date: str

    def as_layout_dict(self) -> Dict[str, str]:
        """Keyed by the layout field names."""
        return {
            "fullName": self.full_name,
            "email": self.email,
            "location": self.location,
            "date": self.date,
        }
