from datetime import date
from typing import Literal, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.api.deps import require_admin
from app.core.logging import get_logger
from app.db import get_db
from app.models.admin import Admin
from app.schemas.feed_request import (
    DateRange,
    FeedRequestCreate,
    FeedRequestList,
    FeedRequestRead,
)
from app.services import feed_request_service

router = APIRouter(prefix="/requests", tags=["feed requests"])
logger = get_logger(module="requests")


@router.get("/", response_model=FeedRequestList)
def list_requests(
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    status_filter: Optional[Literal["Pending", "Approved", "Rejected"]] = Query(default=None, alias="status"),
    db: Session = Depends(get_db),
    current_admin: Admin = Depends(require_admin),
):
    rows, start, end = feed_request_service.list_feed_requests(
        db=db,
        start_date=start_date,
        end_date=end_date,
        status=status_filter,
    )
    logger.info(
        "Listing feed requests",
        start_date=str(start) if start else None,
        end_date=str(end) if end else None,
        count=len(rows),
    )
    return FeedRequestList(
        count=len(rows),
        data=[FeedRequestRead.model_validate(r) for r in rows],
        date_range=DateRange(start_date=start, end_date=end),
    )


@router.get("/pending", response_model=FeedRequestList)
def list_pending(
    db: Session = Depends(get_db),
    current_admin: Admin = Depends(require_admin),
):
    rows = feed_request_service.list_pending_requests(db)
    return FeedRequestList(
        count=len(rows),
        data=[FeedRequestRead.model_validate(r) for r in rows],
    )


@router.get("/{request_id}", response_model=FeedRequestRead)
def get_request(
    request_id: int,
    db: Session = Depends(get_db),
    current_admin: Admin = Depends(require_admin),
):
    return feed_request_service.get_feed_request(db, request_id)


@router.post("/", response_model=FeedRequestRead, status_code=status.HTTP_201_CREATED)
def create_request(
    request_in: FeedRequestCreate,
    db: Session = Depends(get_db),
    current_admin: Admin = Depends(require_admin),
):
    return feed_request_service.create_feed_request(
        db,
        farmer_id=request_in.farmer_id,
        feed_id=request_in.feed_id,
        qty_bags=request_in.qty_bags,
        actor=current_admin.name,
    )


@router.patch("/{request_id}/approve", response_model=FeedRequestRead)
def approve_request(
    request_id: int,
    db: Session = Depends(get_db),
    current_admin: Admin = Depends(require_admin),
):
    return feed_request_service.approve_feed_request(db, request_id, actor=current_admin.name)


@router.patch("/{request_id}/reject", response_model=FeedRequestRead)
def reject_request(
    request_id: int,
    db: Session = Depends(get_db),
    current_admin: Admin = Depends(require_admin),
):
    return feed_request_service.reject_feed_request(db, request_id, actor=current_admin.name)
