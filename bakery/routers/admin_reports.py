# bakery/routers/admin_reports.py
from datetime import datetime

from fastapi import APIRouter, Depends, Query, Response
from sqlmodel import Session

from bakery.core.auth import require_admin
from bakery.database import get_session
from bakery.repositories.order_repo import OrderRepository
from bakery.repositories.user_repo import UserRepository
from bakery.schemas.report import WeeklyReportRead
from bakery.services.report_service import ReportService

router = APIRouter(
    prefix="/admin/reports",
    tags=["Admin Reports"],
    dependencies=[Depends(require_admin)],
)

service = ReportService(OrderRepository(), UserRepository())


@router.get("/weekly", response_model=WeeklyReportRead)
def weekly_report(
    session: Session = Depends(get_session),
    reference: datetime | None = Query(
        default=None,
        description="Any instant inside the wanted week; naive values are bakery local time. Defaults to now.",
    ),
    offset: int = Query(default=0, description="Weeks relative to the reference week; -1 is last week."),
):
    """
    Weekly summary of orders, revenue, profit and bread quantities.
    """
    return service.get_weekly_report(session, reference=reference, offset=offset)


@router.get("/weekly/export")
def export_weekly_report(
    session: Session = Depends(get_session),
    reference: datetime | None = None,
    offset: int = 0,
):
    """
    Download the weekly summary as a JSON file.
    """
    filename, content = service.export_weekly_report(session, reference=reference, offset=offset)
    return Response(
        content=content,
        media_type="application/json",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
