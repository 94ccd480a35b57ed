"""Historique des actions / Audit trail helper."""

import json

from sqlalchemy.ext.asyncio import AsyncSession

from fleetdesk.models.audit import AuditLog
from fleetdesk.models.user import User
from fleetdesk.utils.dates import now_iso


async def log_audit(
    db: AsyncSession,
    entity_type: str,
    entity_id: int | None,
    action: str,
    user: User | str | None,
    changes: dict | None = None,
) -> None:
    """Enregistrer une action dans l'historique / Log an action to audit_logs."""
    if isinstance(user, User):
        user = user.email if user.is_staff else user.name
    db.add(AuditLog(
        entity_type=entity_type,
        entity_id=entity_id,
        action=action,
        changes=json.dumps(changes, ensure_ascii=False, default=str) if changes else None,
        user=user,
        timestamp=now_iso(),
    ))
