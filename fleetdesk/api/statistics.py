"""Routes Statistiques / Statistics API routes."""

import io
from datetime import date

from fastapi import APIRouter, Depends
from fastapi.responses import StreamingResponse
from sqlalchemy.ext.asyncio import AsyncSession

from fleetdesk.api.deps import get_current_user
from fleetdesk.database import get_db
from fleetdesk.models.user import User
from fleetdesk.schemas.statistics import StatisticsRead
from fleetdesk.services.export_service import STATISTICS_FIELDS, ExportService
from fleetdesk.services.statistics import driver_statistics

router = APIRouter()

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


@router.get("/", response_model=StatisticsRead)
async def get_statistics(
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    """Statistiques par chauffeur / Per-driver statistics. Un chauffeur ne voit que lui-même."""
    return {"drivers": await driver_statistics(db, user)}


@router.get("/export")
async def export_statistics(
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    """Export XLSX des statistiques / XLSX export of the statistics."""
    rows = ExportService.statistics_rows(await driver_statistics(db, user))
    content = ExportService.to_xlsx(rows, STATISTICS_FIELDS, sheet_name="Statistics")
    filename = f"statistics_{date.today().isoformat()}.xlsx"
    return StreamingResponse(
        io.BytesIO(content),
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
