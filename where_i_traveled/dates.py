# dates.py
from __future__ import annotations

from datetime import date, datetime, time
from typing import Optional

import dateparser


def parse_visit_date(text: str, today: Optional[date] = None) -> date:
    """Parse a visit date such as '2024-03-12', 'yesterday' or '3 days ago'.

    Visits are in the past, so ambiguous phrases ('March 12') resolve to
    the most recent matching date.

    Raises:
        ValueError: If the text is not a recognizable date.
    """
    cleaned = text.strip()
    if not cleaned:
        raise ValueError("Visit date is empty")

    try:
        return date.fromisoformat(cleaned)
    except ValueError:
        pass

    settings = {"PREFER_DATES_FROM": "past", "DATE_ORDER": "DMY"}
    if today is not None:
        settings["RELATIVE_BASE"] = datetime.combine(today, time(12, 0))

    dt = dateparser.parse(cleaned, settings=settings)
    if dt is None:
        raise ValueError(f"Unrecognized visit date: {text!r}")
    return dt.date()
