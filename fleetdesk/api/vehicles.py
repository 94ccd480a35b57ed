"""Routes Véhicules et entretien / Vehicle and maintenance API routes."""

from fastapi import APIRouter, Depends, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from fleetdesk.api.deps import get_current_user, require_staff
from fleetdesk.config import settings
from fleetdesk.database import get_db
from fleetdesk.exceptions import ConflictError, NotFound, ValidationError
from fleetdesk.models.user import User
from fleetdesk.models.vehicle import Vehicle
from fleetdesk.schemas.vehicle import (
    MaintenanceAction,
    MaintenanceAlert,
    MaintenanceRead,
    VehicleBrief,
    VehicleCreate,
    VehicleRead,
    VehicleUpdate,
)
from fleetdesk.services import maintenance
from fleetdesk.services.route_lifecycle import lock_vehicle

router = APIRouter()

# Limites par défaut depuis la configuration / Default limits from settings
_DEFAULT_LIMITS = {
    "oil_limit_km": lambda: settings.DEFAULT_OIL_LIMIT_KM,
    "adblue_limit_km": lambda: settings.DEFAULT_ADBLUE_LIMIT_KM,
    "brakes_limit_km": lambda: settings.DEFAULT_BRAKES_LIMIT_KM,
    "bearings_limit_km": lambda: settings.DEFAULT_BEARINGS_LIMIT_KM,
    "brake_fluid_limit_months": lambda: settings.DEFAULT_BRAKE_FLUID_LIMIT_MONTHS,
    "green_card_limit_months": lambda: settings.DEFAULT_GREEN_CARD_LIMIT_MONTHS,
    "coolant_limit_months": lambda: settings.DEFAULT_COOLANT_LIMIT_MONTHS,
}


async def _get_vehicle(db: AsyncSession, vehicle_id: int) -> Vehicle:
    vehicle = await db.get(Vehicle, vehicle_id)
    if not vehicle:
        raise NotFound("Vehicle", vehicle_id)
    return vehicle


async def _check_plate(db: AsyncSession, plate: str, vehicle_id: int | None = None) -> None:
    query = select(Vehicle.id).where(Vehicle.license_plate == plate)
    if vehicle_id is not None:
        query = query.where(Vehicle.id != vehicle_id)
    if (await db.execute(query)).first():
        raise ConflictError(f"License plate {plate} already exists", {"license_plate": plate})


def _maintenance_view(vehicle: Vehicle) -> MaintenanceRead:
    return MaintenanceRead.model_validate(maintenance.vehicle_overview(vehicle), from_attributes=True)


@router.get("/", response_model=list[VehicleRead])
async def list_vehicles(
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    """Lister les véhicules / List vehicles."""
    result = await db.execute(select(Vehicle).order_by(Vehicle.name))
    return result.scalars().all()


@router.get("/maintenance/alerts", response_model=list[MaintenanceAlert])
async def maintenance_alerts(
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_staff),
):
    """Véhicules nécessitant un entretien / Vehicles needing attention."""
    result = await db.execute(select(Vehicle).order_by(Vehicle.name))
    alerts = []
    for vehicle in result.scalars().all():
        view = _maintenance_view(vehicle)
        if view.needs_attention:
            alerts.append(MaintenanceAlert(vehicle=VehicleBrief.model_validate(vehicle), maintenance=view))
    return alerts


@router.get("/{vehicle_id}", response_model=VehicleRead)
async def get_vehicle(
    vehicle_id: int,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    """Voir un véhicule / Get vehicle detail."""
    return await _get_vehicle(db, vehicle_id)


@router.post("/", response_model=VehicleRead, status_code=status.HTTP_201_CREATED)
async def create_vehicle(
    data: VehicleCreate,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_staff),
):
    """Créer un véhicule / Create vehicle."""
    await _check_plate(db, data.license_plate)
    dump = data.model_dump()
    for key, default in _DEFAULT_LIMITS.items():
        if not dump.get(key) or dump[key] <= 0:
            dump[key] = default()
    vehicle = Vehicle(**dump, oil_km=0, adblue_km=0, brakes_km=0, bearings_km=0)
    db.add(vehicle)
    await db.flush()
    await db.refresh(vehicle)
    return vehicle


@router.put("/{vehicle_id}", response_model=VehicleRead)
async def update_vehicle(
    vehicle_id: int,
    data: VehicleUpdate,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_staff),
):
    """Modifier un véhicule / Update vehicle. Les compteurs d'usure passent par /maintenance."""
    vehicle = await _get_vehicle(db, vehicle_id)
    changes = data.model_dump(exclude_unset=True)
    if changes.get("license_plate"):
        await _check_plate(db, changes["license_plate"], vehicle_id)
    for key, value in changes.items():
        if value is None and key != "current_km":
            continue
        if key.endswith(("_limit_km", "_limit_months")) and value <= 0:
            raise ValidationError(f"{key} must be positive", {key: value})
        setattr(vehicle, key, value)
    await db.flush()
    await db.refresh(vehicle)
    return vehicle


@router.delete("/{vehicle_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_vehicle(
    vehicle_id: int,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_staff),
):
    """Supprimer un véhicule / Delete vehicle. Réparations supprimées, trajets et mouvements détachés."""
    vehicle = await _get_vehicle(db, vehicle_id)
    await db.delete(vehicle)


# ─── Entretien / Maintenance ───


@router.get("/{vehicle_id}/maintenance", response_model=MaintenanceRead)
async def get_maintenance(
    vehicle_id: int,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    """État d'entretien dérivé / Derived maintenance status."""
    return _maintenance_view(await _get_vehicle(db, vehicle_id))


@router.post("/{vehicle_id}/maintenance", response_model=VehicleRead)
async def apply_maintenance(
    vehicle_id: int,
    data: MaintenanceAction,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_staff),
):
    """Créditer des km, remettre un compteur à zéro ou saisir une date / Add km, reset a counter or set a date."""
    vehicle = await lock_vehicle(db, vehicle_id)
    if vehicle is None:
        raise NotFound("Vehicle", vehicle_id)

    if data.action == "add":
        if not data.km or data.km <= 0:
            raise ValidationError("km must be a positive number", {"km": data.km})
        maintenance.credit_distance(vehicle, data.km)
    elif data.action == "reset":
        if not data.type:
            raise ValidationError("Counter type is required")
        maintenance.reset_counter(vehicle, data.type)
    else:
        if not data.type:
            raise ValidationError("Date type is required")
        maintenance.set_maintenance_date(vehicle, data.type, data.date)

    await db.flush()
    await db.refresh(vehicle)
    return vehicle
