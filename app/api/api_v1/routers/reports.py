from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from app.api.deps import require_admin
from app.core.logging import get_logger
from app.db import get_db
from app.models.admin import Admin
from app.schemas.report import FarmerReport, StockReport, SummaryReport
from app.services import admin_service, report_service

router = APIRouter(prefix="/reports", tags=["reports"])
logger = get_logger(module="reports")


@router.get("/", response_model=SummaryReport)
def summary_report(
    farmer_id: Optional[int] = None,
    admin_id: Optional[int] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    db: Session = Depends(get_db),
    current_admin: Admin = Depends(require_admin),
):
    approved_by = None
    if admin_id is not None:
        admin = admin_service.get_admin(db, admin_id)
        if not admin:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Admin not found")
        approved_by = admin.name

    return report_service.build_summary_report(
        db,
        farmer_id=farmer_id,
        approved_by=approved_by,
        start_date=start_date,
        end_date=end_date,
    )


@router.get("/farmer/{farmer_id}", response_model=FarmerReport)
def farmer_report(
    farmer_id: int,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    db: Session = Depends(get_db),
    current_admin: Admin = Depends(require_admin),
):
    return report_service.build_farmer_report(
        db, farmer_id=farmer_id, start_date=start_date, end_date=end_date
    )


@router.get("/stock", response_model=StockReport)
def stock_report(
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    db: Session = Depends(get_db),
    current_admin: Admin = Depends(require_admin),
):
    return report_service.build_stock_report(db, start_date=start_date, end_date=end_date)
