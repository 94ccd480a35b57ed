"""
Conversion des champs numeriques saisis / Coercion of user-entered numeric fields.

Les formulaires envoient des nombres ou des chaines ; une valeur non numerique
est traitee comme absente.
Forms send numbers or strings; non-numeric input is treated as absent.
"""

import re
from typing import Annotated

from pydantic import BeforeValidator

from fleetdesk.utils.dates import parse_day

_INT_PREFIX = re.compile(r"^\s*([+-]?\d+)")
_FLOAT_PREFIX = re.compile(r"^\s*([+-]?(?:\d+(?:\.\d*)?|\.\d+))")


def coerce_int(value):
    """'250' -> 250, '250.7' -> 250, 'abc' -> None."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if value == value else None  # NaN
    if isinstance(value, str):
        match = _INT_PREFIX.match(value)
        return int(match.group(1)) if match else None
    return None


def coerce_float(value):
    """'12,5' -> 12.5, '12.5 EUR' -> 12.5, '' -> None."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value) if value == value else None
    if isinstance(value, str):
        match = _FLOAT_PREFIX.match(value.replace(",", "."))
        return float(match.group(1)) if match else None
    return None


# Types annotes pour les schemas / Annotated types for schemas
LooseInt = Annotated[int | None, BeforeValidator(coerce_int)]
LooseFloat = Annotated[float | None, BeforeValidator(coerce_float)]


def coerce_day(value):
    """Date saisie -> 'YYYY-MM-DD' / Entered date -> 'YYYY-MM-DD'."""
    if value is None or value == "":
        return None
    return parse_day(value).isoformat()


DayStr = Annotated[str, BeforeValidator(coerce_day)]


_WHOLE_INT = re.compile(r"^\s*[+-]?\d+\s*$")


def strict_int(value):
    """Entier exact ou refus / Exact integer or rejection: '3' -> 3, 2.5 / '2.5' / '3 ks' -> erreur."""
    if value is None:
        return None
    if isinstance(value, bool):
        raise ValueError("must be an integer")
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str) and _WHOLE_INT.match(value):
        return int(value)
    raise ValueError("must be an integer")


# Quantités de stock : jamais tronquées / Stock quantities: never truncated
WholeInt = Annotated[int | None, BeforeValidator(strict_int)]
