"""Routes Rapports journaliers / Daily report API routes."""

from fastapi import APIRouter, Depends, status
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from fleetdesk.api.deps import get_current_user, require_driver, require_staff
from fleetdesk.database import get_db
from fleetdesk.exceptions import NotFound
from fleetdesk.models.daily_report import CarCheck, DailyReport
from fleetdesk.models.user import User
from fleetdesk.schemas.daily_report import DailyReportCreate, DailyReportRead, NokReportList, ResolveRequest
from fleetdesk.services import route_lifecycle

router = APIRouter()


def _report_query():
    return select(DailyReport).options(selectinload(DailyReport.route))


@router.get("/", response_model=list[DailyReportRead])
async def list_my_reports(
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    """Rapports du chauffeur connecté / Reports of the current driver."""
    result = await db.execute(
        _report_query().where(DailyReport.driver_id == user.id).order_by(DailyReport.created_at.desc())
    )
    return result.scalars().all()


@router.post("/", response_model=DailyReportRead, status_code=status.HTTP_201_CREATED)
async def create_report(
    data: DailyReportCreate,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_driver),
):
    """Soumettre le rapport et clôturer le trajet / Submit the report and close the route."""
    report = await route_lifecycle.submit_daily_report(
        db,
        user,
        data.route_id,
        data.actual_km,
        fuel_cost=data.fuel_cost,
        car_check=data.car_check,
        car_check_note=data.car_check_note,
    )
    result = await db.execute(
        _report_query().where(DailyReport.id == report.id).execution_options(populate_existing=True)
    )
    return result.scalar_one()


@router.get("/nok", response_model=NokReportList)
async def list_nok_reports(
    resolved: bool | None = None,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_staff),
):
    """Contrôles véhicule NOK / NOK vehicle checks, avec le nombre non résolu."""
    query = _report_query().where(DailyReport.car_check == CarCheck.NOK)
    if resolved is not None:
        query = query.where(DailyReport.resolved.is_(resolved))
    reports = (await db.execute(query.order_by(DailyReport.created_at.desc()))).scalars().all()

    count = await db.execute(
        select(func.count(DailyReport.id)).where(
            DailyReport.car_check == CarCheck.NOK, DailyReport.resolved.is_(False)
        )
    )
    return NokReportList(
        reports=[DailyReportRead.model_validate(r) for r in reports],
        count=count.scalar() or 0,
    )


@router.patch("/{report_id}/resolve", response_model=DailyReportRead)
async def resolve_report(
    report_id: int,
    data: ResolveRequest,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_staff),
):
    """Marquer un NOK comme traité / Mark a NOK report as handled."""
    report = await db.get(DailyReport, report_id)
    if not report:
        raise NotFound("Daily report", report_id)
    report.resolved = data.resolved
    await db.flush()
    result = await db.execute(
        _report_query().where(DailyReport.id == report.id).execution_options(populate_existing=True)
    )
    return result.scalar_one()
