from datetime import timedelta
from typing import List, Optional

from sqlalchemy import func, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.errors import DuplicateError, InvalidStateError
from app.core.logging import get_logger
from app.models.base import utcnow
from app.models.farmer import Farmer, FarmerStatus
from app.models.feed_history import FeedHistoryEntry
from app.models.feed_request import FeedRequest
from app.schemas.farmer import FarmerCreate, FarmerStats, FarmerUpdate

logger = get_logger(module="farmer_service")


def _duplicate_field(exc: IntegrityError) -> Optional[str]:
    """Column behind a unique violation, or None for any other integrity error."""
    message = str(exc.orig).lower()
    if "unique" not in message and "duplicate" not in message:
        return None
    for field in ("mobile", "code"):
        if field in message:
            return field
    return None


def create_farmer(db: Session, farmer_in: FarmerCreate, actor: str) -> Farmer:
    now = utcnow()
    db_obj = Farmer(
        **farmer_in.model_dump(),
        created_by=actor,
        created_at=now,
        updated_at=now,
    )
    db.add(db_obj)
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        field = _duplicate_field(exc)
        if field is None:
            raise
        logger.warning("Duplicate farmer", field=field, code=farmer_in.code)
        raise DuplicateError(f"Farmer with this {field} already exists") from exc
    db.refresh(db_obj)

    logger.info(
        "Farmer created",
        farmer_id=db_obj.id,
        code=db_obj.code,
        created_by=actor,
    )
    return db_obj


def get_farmer(db: Session, farmer_id: int) -> Optional[Farmer]:
    return db.get(Farmer, farmer_id)


def list_farmers(
    db: Session,
    status: Optional[str] = None,
    search: Optional[str] = None,
    skip: int = 0,
    limit: int = 100,
) -> List[Farmer]:
    query = db.query(Farmer)
    if status:
        query = query.filter(Farmer.status == status)
    if search:
        pattern = f"%{search}%"
        query = query.filter(
            or_(
                Farmer.full_name.ilike(pattern),
                Farmer.mobile.ilike(pattern),
                Farmer.code.ilike(pattern),
                Farmer.email.ilike(pattern),
            )
        )
    return (
        query.order_by(Farmer.created_at.desc())
        .offset(skip)
        .limit(limit)
        .all()
    )


def update_farmer(db: Session, farmer_id: int, farmer_in: FarmerUpdate) -> Optional[Farmer]:
    db_obj = get_farmer(db, farmer_id)
    if not db_obj:
        logger.warning("Update of unknown farmer", farmer_id=farmer_id)
        return None

    update_data = farmer_in.model_dump(exclude_unset=True)
    for field, value in update_data.items():
        setattr(db_obj, field, value)
    db_obj.updated_at = utcnow()

    db.add(db_obj)
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        field = _duplicate_field(exc)
        if field is None:
            raise
        raise DuplicateError(f"Farmer with this {field} already exists") from exc
    db.refresh(db_obj)

    logger.info("Farmer updated", farmer_id=farmer_id, fields=sorted(update_data))
    return db_obj


def toggle_farmer_status(db: Session, farmer_id: int) -> Optional[Farmer]:
    db_obj = get_farmer(db, farmer_id)
    if not db_obj:
        return None

    db_obj.status = (
        FarmerStatus.INACTIVE.value if db_obj.is_active else FarmerStatus.ACTIVE.value
    )
    db_obj.updated_at = utcnow()
    db.commit()
    db.refresh(db_obj)

    logger.info("Farmer status toggled", farmer_id=farmer_id, status=db_obj.status)
    return db_obj


def delete_farmer(db: Session, farmer_id: int) -> bool:
    db_obj = get_farmer(db, farmer_id)
    if not db_obj:
        logger.warning("Delete of unknown farmer", farmer_id=farmer_id)
        return False

    has_requests = (
        db.query(FeedRequest.id).filter(FeedRequest.farmer_id == farmer_id).first()
    )
    if has_requests:
        raise InvalidStateError(
            "Farmer has feed requests; mark the farmer Inactive instead"
        )

    db.delete(db_obj)
    db.commit()

    logger.info("Farmer deleted", farmer_id=farmer_id)
    return True


def farmer_stats(db: Session) -> FarmerStats:
    total = db.query(func.count(Farmer.id)).scalar() or 0
    active = (
        db.query(func.count(Farmer.id))
        .filter(Farmer.status == FarmerStatus.ACTIVE.value)
        .scalar()
        or 0
    )
    recent = (
        db.query(func.count(Farmer.id))
        .filter(Farmer.created_at >= utcnow() - timedelta(days=30))
        .scalar()
        or 0
    )
    return FarmerStats(total=total, active=active, inactive=total - active, recent=recent)


def list_farmer_history(db: Session, farmer_id: int) -> List[FeedHistoryEntry]:
    return (
        db.query(FeedHistoryEntry)
        .filter(FeedHistoryEntry.farmer_id == farmer_id)
        .order_by(FeedHistoryEntry.date.desc(), FeedHistoryEntry.id.desc())
        .all()
    )
