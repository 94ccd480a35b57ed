"""Dates et horodatages / Dates and timestamps.

Les dates sont stockees en 'YYYY-MM-DD', les horodatages en ISO 8601 UTC.
Dates are stored as 'YYYY-MM-DD', timestamps as ISO 8601 UTC.
"""

from datetime import date, datetime, timezone


def now_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="seconds")


def parse_day(value: str | date | datetime) -> date:
    """Jour calendaire depuis 'YYYY-MM-DD' ou un timestamp ISO / Calendar day from a date or ISO timestamp.

    Un timestamp garde le jour de son propre fuseau / A timestamp keeps the day of its own offset.
    Leve ValueError si le format est invalide / Raises ValueError on malformed input.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value).strip()
    if len(text) > 10:
        return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
    return date.fromisoformat(text)
