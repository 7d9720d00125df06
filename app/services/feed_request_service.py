"""
Feed request lifecycle.

A request is created Pending for an Active farmer and moves exactly once,
to Approved or Rejected. Approval is the only operation touching several
rows at once: it takes the bags out of stock, appends a feed history entry,
freezes the stock prices onto the request and flips its status, all in one
transaction. Any failure rolls the whole thing back and the request stays
Pending.
"""
import calendar
from datetime import date, datetime
from typing import List, Optional, Tuple

from sqlalchemy import update
from sqlalchemy.orm import Session, joinedload

from app.core.errors import (
    InsufficientStockError,
    IntegrityViolationError,
    InvalidStateError,
    NotFoundError,
)
from app.core.logging import get_logger
from app.core.timezone import local_day_bounds, local_today
from app.models.base import utcnow
from app.models.farmer import Farmer
from app.models.feed_history import FeedHistoryEntry
from app.models.feed_request import FeedRequest, RequestStatus
from app.services import stock_service

logger = get_logger(module="feed_request_service")


def _with_relations(query):
    return query.options(joinedload(FeedRequest.farmer), joinedload(FeedRequest.feed))


def get_feed_request(db: Session, request_id: int) -> FeedRequest:
    obj = _with_relations(db.query(FeedRequest)).filter(FeedRequest.id == request_id).first()
    if not obj:
        raise NotFoundError("Request not found")
    return obj


def _load_pending_for_update(db: Session, request_id: int) -> FeedRequest:
    obj = (
        db.query(FeedRequest)
        .filter(FeedRequest.id == request_id)
        .with_for_update()
        .first()
    )
    if not obj:
        raise NotFoundError("Request not found")
    if not obj.is_pending:
        raise InvalidStateError("Request is already processed")
    return obj


def _mark_processed(
    db: Session,
    request_id: int,
    status: RequestStatus,
    actor: str,
    now: datetime,
    **snapshot,
) -> None:
    # The WHERE clause re-asserts Pending so a concurrent transition loses.
    result = db.execute(
        update(FeedRequest)
        .where(
            FeedRequest.id == request_id,
            FeedRequest.status == RequestStatus.PENDING.value,
        )
        .values(
            status=status.value,
            approved_by=actor,
            approved_at=now,
            updated_at=now,
            **snapshot,
        )
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != 1:
        raise InvalidStateError("Request is already processed")


def create_feed_request(
    db: Session,
    farmer_id: int,
    feed_id: int,
    qty_bags: int,
    actor: str,
) -> FeedRequest:
    farmer = db.get(Farmer, farmer_id)
    if not farmer:
        raise NotFoundError("Farmer not found")
    if not farmer.is_active:
        logger.warning("Request for inactive farmer refused", farmer_id=farmer_id)
        raise InvalidStateError("Cannot create request for inactive farmer")

    feed = stock_service.get_stock(db, feed_id)
    if not feed:
        raise NotFoundError("Feed not found")

    if qty_bags < 1:
        raise InvalidStateError("Quantity must be at least 1 bag")

    if feed.quantity_bags < qty_bags:
        logger.warning(
            "Request exceeds available stock",
            farmer_id=farmer_id,
            stock_id=feed_id,
            requested=qty_bags,
            available=feed.quantity_bags,
        )
        raise InsufficientStockError(available=feed.quantity_bags)

    # no reservation: availability is checked again on approval
    now = utcnow()
    db_obj = FeedRequest(
        farmer_id=farmer_id,
        feed_id=feed_id,
        qty_bags=qty_bags,
        price=feed.selling_price * qty_bags,
        feed_price_at_creation=feed.selling_price,
        status=RequestStatus.PENDING.value,
        created_by=actor,
        created_at=now,
        updated_at=now,
    )
    db.add(db_obj)
    db.commit()

    logger.info(
        "Feed request created",
        request_id=db_obj.id,
        farmer_id=farmer_id,
        stock_id=feed_id,
        qty_bags=qty_bags,
        price=str(db_obj.price),
        created_by=actor,
    )
    return get_feed_request(db, db_obj.id)


def approve_feed_request(db: Session, request_id: int, actor: str) -> FeedRequest:
    try:
        feed_request = _load_pending_for_update(db, request_id)

        feed = stock_service.get_stock(db, feed_request.feed_id, for_update=True)
        farmer = db.get(Farmer, feed_request.farmer_id)
        if not feed or not farmer:
            logger.error(
                "Feed request points at missing rows",
                request_id=request_id,
                stock_found=feed is not None,
                farmer_found=farmer is not None,
            )
            raise IntegrityViolationError("Invalid request data")

        if feed.quantity_bags < feed_request.qty_bags:
            raise InsufficientStockError(available=feed.quantity_bags)

        qty = feed_request.qty_bags
        now = utcnow()

        remaining = stock_service.decrement_stock(db, feed.id, qty, actor)

        db.add(
            FeedHistoryEntry(
                farmer_id=feed_request.farmer_id,
                date=now,
                feed_type=feed.name,
                bags=qty,
                price=feed_request.price,
                approved_by=actor,
            )
        )

        # prices as they stand now, not feed_price_at_creation
        _mark_processed(
            db,
            request_id,
            RequestStatus.APPROVED,
            actor,
            now,
            selling_price_at_approval=feed.selling_price,
            purchase_price_at_approval=feed.purchase_price,
            total_profit_at_approval=feed.margin_per_bag * qty,
        )

        db.commit()
    except Exception as exc:
        db.rollback()
        logger.warning(
            "Feed request approval aborted",
            request_id=request_id,
            approved_by=actor,
            reason=str(exc),
        )
        raise

    logger.info(
        "Feed request approved",
        request_id=request_id,
        stock_id=feed_request.feed_id,
        qty_bags=qty,
        remaining_bags=remaining,
        approved_by=actor,
    )
    return get_feed_request(db, request_id)


def reject_feed_request(db: Session, request_id: int, actor: str) -> FeedRequest:
    try:
        _load_pending_for_update(db, request_id)
        _mark_processed(db, request_id, RequestStatus.REJECTED, actor, utcnow())
        db.commit()
    except Exception:
        db.rollback()
        raise

    logger.info("Feed request rejected", request_id=request_id, rejected_by=actor)
    return get_feed_request(db, request_id)


def list_pending_requests(db: Session) -> List[FeedRequest]:
    return (
        _with_relations(db.query(FeedRequest))
        .filter(FeedRequest.status == RequestStatus.PENDING.value)
        .order_by(FeedRequest.created_at.desc(), FeedRequest.id.desc())
        .all()
    )


def default_date_range(today: Optional[date] = None) -> Tuple[date, date]:
    """
    Current third of the month: 1-10, 11-20 or 21-last day.
    Milk payments at the cooperative run on the same cycle.
    """
    if today is None:
        today = local_today()

    if today.day <= 10:
        start_day, end_day = 1, 10
    elif today.day <= 20:
        start_day, end_day = 11, 20
    else:
        start_day = 21
        end_day = calendar.monthrange(today.year, today.month)[1]

    return today.replace(day=start_day), today.replace(day=end_day)


def list_feed_requests(
    db: Session,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    status: Optional[str] = None,
) -> Tuple[List[FeedRequest], Optional[date], Optional[date]]:
    """Requests created in [start_date, end_date], newest first."""
    if start_date is None and end_date is None:
        start_date, end_date = default_date_range()

    query = _with_relations(db.query(FeedRequest))
    start_dt, end_dt = local_day_bounds(start_date, end_date)
    if start_dt is not None:
        query = query.filter(FeedRequest.created_at >= start_dt)
    if end_dt is not None:
        query = query.filter(FeedRequest.created_at < end_dt)
    if status:
        query = query.filter(FeedRequest.status == status)

    rows = query.order_by(FeedRequest.created_at.desc(), FeedRequest.id.desc()).all()
    return rows, start_date, end_date
