"""Date parsing and age helpers."""

from __future__ import annotations

from datetime import date, datetime

DAYS_PER_YEAR: float = 365.25

_DATE_FORMATS: tuple[str, ...] = ("%d/%m/%Y", "%Y-%m-%d", "%d-%m-%Y", "%Y/%m/%d")


def parse_date(text: str | date) -> date:
    """Parse a date string, ignoring any time component.

    Accepts ``dd/mm/yyyy`` (the survey export format) and ISO
    ``yyyy-mm-dd``.  ``date``/``datetime`` instances pass straight through.

    Raises:
        ValueError: If the text matches none of the accepted formats.
    """
    if isinstance(text, datetime):
        return text.date()
    if isinstance(text, date):
        return text
    cleaned = str(text).strip().split(" ")[0].split("T")[0]
    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(cleaned, fmt).date()
        except ValueError:
            continue
    raise ValueError(f"Unrecognised date '{text}'")


def years_between(base_date: date, other: date) -> float:
    """Return ``base_date - other`` in fractional years (365.25-day years).

    The result is negative when *other* lies after *base_date*.
    """
    return (base_date - other).days / DAYS_PER_YEAR
