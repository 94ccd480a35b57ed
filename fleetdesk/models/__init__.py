"""
Modèles SQLAlchemy / SQLAlchemy models.
Importer tous les modèles ici pour que Base.metadata les connaisse.
Import all models here so Base.metadata knows them.
"""

from fleetdesk.models.user import User, UserRole, STAFF_ROLES
from fleetdesk.models.vehicle import Vehicle
from fleetdesk.models.route import Route, RouteStatus, Order
from fleetdesk.models.daily_report import DailyReport, CarCheck
from fleetdesk.models.availability import Availability, AvailabilityStatus
from fleetdesk.models.spare_part import SparePart, SparePartMovement, MovementType
from fleetdesk.models.repair import Repair
from fleetdesk.models.note import NoteCategory, Note
from fleetdesk.models.driver_review import DriverReview, ReviewDirection
from fleetdesk.models.audit import AuditLog

__all__ = [
    "User",
    "UserRole",
    "STAFF_ROLES",
    "Vehicle",
    "Route",
    "RouteStatus",
    "Order",
    "DailyReport",
    "CarCheck",
    "Availability",
    "AvailabilityStatus",
    "SparePart",
    "SparePartMovement",
    "MovementType",
    "Repair",
    "NoteCategory",
    "Note",
    "DriverReview",
    "ReviewDirection",
    "AuditLog",
]
