"""
Moteur des compteurs d'entretien / Maintenance counter engine.

Écriture : crédit de km, remise à zéro d'un compteur, saisie d'une date.
Lecture : état dérivé (pourcentage écoulé, jours restants), jamais stocké.
Write side: distance credit, single-counter reset, date entry.
Read side: derived status (percent elapsed, days remaining), never stored.
"""

import enum
from dataclasses import dataclass, field
from datetime import date, datetime, timezone

from dateutil.relativedelta import relativedelta

from fleetdesk.config import settings
from fleetdesk.exceptions import ValidationError
from fleetdesk.models.vehicle import Vehicle
from fleetdesk.utils.dates import parse_day

USAGE_COUNTERS = ("oil", "adblue", "brakes", "bearings")

# Echéances datées : attribut, type (dernier changement / expiration), fenêtre d'alerte en jours
# Date facts: attribute, kind (last change / expiry), lookahead days
LAST_CHANGE = "last_change"
EXPIRY = "expiry"
DATE_FACTS = {
    "brake_fluid": ("brake_fluid_last_change", LAST_CHANGE, 90),
    "coolant": ("coolant_last_change", LAST_CHANGE, 90),
    "green_card": ("green_card_date", EXPIRY, 30),
    "technical_inspection": ("technical_inspection_date", EXPIRY, 30),
}

# Noms acceptés en entrée / Accepted input aliases
_ALIASES = {
    "brakeFluid": "brake_fluid",
    "greenCard": "green_card",
    "fridex": "coolant",
    "technical": "technical_inspection",
    "technicalInspection": "technical_inspection",
}


class CounterState(str, enum.Enum):
    """État d'un compteur km / Usage counter state."""
    OK = "OK"
    SOON = "SOON"
    DUE = "DUE"


class DateState(str, enum.Enum):
    """État d'une échéance datée / Date fact state."""
    OK = "OK"
    SOON = "SOON"
    EXPIRED = "EXPIRED"
    UNKNOWN = "UNKNOWN"


@dataclass
class CounterView:
    name: str
    km: int
    limit_km: int
    percent: float
    status: CounterState
    last_reset: str | None = None


@dataclass
class DateView:
    name: str
    date: str | None
    next_due: str | None
    limit_months: int
    percent: float
    days_remaining: int | None
    status: DateState


@dataclass
class VehicleMaintenance:
    """Vue complète d'un véhicule / Full maintenance view of a vehicle."""
    vehicle_id: int
    counters: list[CounterView] = field(default_factory=list)
    dates: list[DateView] = field(default_factory=list)

    @property
    def needs_attention(self) -> bool:
        return any(c.status == CounterState.DUE for c in self.counters) or any(
            d.status == DateState.EXPIRED for d in self.dates
        )


def canonical_name(which: str) -> str:
    return _ALIASES.get(which, which)


# ─── Écriture / Write side ───


def credit_distance(vehicle: Vehicle, km: int | None) -> int:
    """Ajouter km aux quatre compteurs / Add km to all four usage counters.

    Retourne les km crédités (0 si km <= 0) / Returns the credited km (0 when km <= 0).
    """
    if not km or km <= 0:
        return 0
    for counter in USAGE_COUNTERS:
        attr = f"{counter}_km"
        setattr(vehicle, attr, (getattr(vehicle, attr) or 0) + km)
    return km


def reset_counter(vehicle: Vehicle, which: str, now: datetime | None = None) -> None:
    """Remettre un seul compteur à zéro / Reset exactly one counter."""
    now = now or datetime.now(timezone.utc)
    which = canonical_name(which)
    if which in USAGE_COUNTERS:
        setattr(vehicle, f"{which}_km", 0)
        setattr(vehicle, f"{which}_last_reset", now.isoformat(timespec="seconds"))
    elif which == "brake_fluid":
        vehicle.brake_fluid_last_change = now.date().isoformat()
    else:
        raise ValidationError(f"Unknown counter: {which}", {"type": which})


def set_maintenance_date(vehicle: Vehicle, which: str, value: str | date | None) -> None:
    """Écraser la date d'une échéance / Overwrite a date-based fact. Aucune contrainte passé/futur."""
    which = canonical_name(which)
    if which not in DATE_FACTS:
        raise ValidationError(f"Unknown maintenance date: {which}", {"type": which})
    if value in (None, ""):
        raise ValidationError("Date is required", {"type": which})
    try:
        day = parse_day(value)
    except ValueError:
        raise ValidationError(f"Invalid date: {value}", {"type": which})
    attr = DATE_FACTS[which][0]
    setattr(vehicle, attr, day.isoformat())


# ─── Lecture / Read side ───


def counter_status(name: str, km: int | None, limit_km: int | None, last_reset: str | None = None) -> CounterView:
    km = km or 0
    percent = (km / limit_km * 100) if limit_km and limit_km > 0 else 0.0
    if percent >= 100:
        state = CounterState.DUE
    elif percent >= 80:
        state = CounterState.SOON
    else:
        state = CounterState.OK
    return CounterView(
        name=name,
        km=km,
        limit_km=limit_km or 0,
        percent=round(percent, 1),
        status=state,
        last_reset=last_reset,
    )


def date_status(
    name: str,
    value: str | None,
    limit_months: int,
    kind: str,
    lookahead_days: int,
    today: date | None = None,
) -> DateView:
    """Etat d'une échéance datée / Status of a date-based fact.

    last_change : échéance = D + M mois, fenêtre [D, échéance].
    expiry : échéance = date stockée, fenêtre [expiration - M mois, expiration].
    """
    if not value:
        return DateView(name, None, None, limit_months, 0.0, None, DateState.UNKNOWN)

    today = today or date.today()
    stored = parse_day(value)
    if kind == LAST_CHANGE:
        start, due = stored, stored + relativedelta(months=limit_months)
    else:
        start, due = stored - relativedelta(months=limit_months), stored

    days_remaining = (due - today).days
    total_days = (due - start).days
    days_used = (today - start).days
    percent = max(0.0, min(days_used / total_days * 100, 100.0)) if total_days > 0 else 0.0

    if days_remaining <= 0:
        return DateView(name, stored.isoformat(), due.isoformat(), limit_months, 100.0, 0, DateState.EXPIRED)
    state = DateState.SOON if days_remaining <= lookahead_days else DateState.OK
    return DateView(name, stored.isoformat(), due.isoformat(), limit_months, round(percent, 1), days_remaining, state)


def _limit_months(vehicle: Vehicle, which: str) -> int:
    if which == "technical_inspection":
        return settings.TECHNICAL_INSPECTION_VALIDITY_MONTHS
    return getattr(vehicle, f"{which}_limit_months")


def vehicle_overview(vehicle: Vehicle, today: date | None = None) -> VehicleMaintenance:
    """Les huit vues d'un véhicule / All eight views of a vehicle."""
    overview = VehicleMaintenance(vehicle_id=vehicle.id)
    for counter in USAGE_COUNTERS:
        overview.counters.append(counter_status(
            counter,
            getattr(vehicle, f"{counter}_km"),
            getattr(vehicle, f"{counter}_limit_km"),
            getattr(vehicle, f"{counter}_last_reset"),
        ))
    for which, (attr, kind, lookahead) in DATE_FACTS.items():
        overview.dates.append(date_status(
            which, getattr(vehicle, attr), _limit_months(vehicle, which), kind, lookahead, today
        ))
    return overview
