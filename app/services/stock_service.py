from decimal import Decimal
from typing import List, Optional

from sqlalchemy import func, or_, update
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.errors import InsufficientStockError, InvalidStateError, NotFoundError
from app.core.logging import get_logger
from app.models.base import utcnow
from app.models.feed_request import FeedRequest
from app.models.stock import StockItem
from app.schemas.stock import StockCreate, StockStats, StockTypeBreakdown, StockUpdate

logger = get_logger(module="stock_service")

_MONEY_FIELDS = ("bag_weight", "purchase_price", "selling_price")


def _to_decimal_fields(data: dict) -> dict:
    for field in _MONEY_FIELDS:
        if data.get(field) is not None:
            data[field] = Decimal(str(data[field]))
    return data


def create_stock(db: Session, stock_in: StockCreate, actor: str) -> StockItem:
    now = utcnow()
    db_obj = StockItem(
        **_to_decimal_fields(stock_in.model_dump()),
        updated_by=actor,
        last_updated=now,
        created_at=now,
        updated_at=now,
    )
    db.add(db_obj)
    db.commit()
    db.refresh(db_obj)

    logger.info(
        "Stock item created",
        stock_id=db_obj.id,
        name=db_obj.name,
        quantity_bags=db_obj.quantity_bags,
    )
    return db_obj


def get_stock(db: Session, feed_id: int, *, for_update: bool = False) -> Optional[StockItem]:
    query = db.query(StockItem).filter(StockItem.id == feed_id)
    if for_update:
        query = query.with_for_update()
    return query.first()


def list_stock(
    db: Session,
    search: Optional[str] = None,
    type: Optional[str] = None,
    low_stock: bool = False,
    skip: int = 0,
    limit: int = 100,
) -> List[StockItem]:
    query = db.query(StockItem)
    if type:
        query = query.filter(StockItem.type.ilike(f"%{type}%"))
    if low_stock:
        query = query.filter(StockItem.quantity_bags < settings.LOW_STOCK_THRESHOLD)
    if search:
        pattern = f"%{search}%"
        query = query.filter(
            or_(StockItem.name.ilike(pattern), StockItem.type.ilike(pattern))
        )
    return (
        query.order_by(StockItem.last_updated.desc(), StockItem.id.desc())
        .offset(skip)
        .limit(limit)
        .all()
    )


def list_low_stock(db: Session, threshold: Optional[int] = None) -> List[StockItem]:
    threshold = settings.LOW_STOCK_THRESHOLD if threshold is None else threshold
    return (
        db.query(StockItem)
        .filter(StockItem.quantity_bags < threshold)
        .order_by(StockItem.quantity_bags.asc())
        .all()
    )


def update_stock(
    db: Session,
    feed_id: int,
    stock_in: StockUpdate,
    actor: str,
) -> Optional[StockItem]:
    db_obj = get_stock(db, feed_id)
    if not db_obj:
        logger.warning("Update of unknown stock item", stock_id=feed_id)
        return None

    update_data = _to_decimal_fields(stock_in.model_dump(exclude_unset=True))
    for field, value in update_data.items():
        setattr(db_obj, field, value)

    now = utcnow()
    db_obj.updated_by = actor
    db_obj.last_updated = now
    db_obj.updated_at = now

    db.add(db_obj)
    db.commit()
    db.refresh(db_obj)

    logger.info(
        "Stock item updated",
        stock_id=feed_id,
        fields=sorted(update_data),
        updated_by=actor,
    )
    return db_obj


def delete_stock(db: Session, feed_id: int) -> bool:
    db_obj = get_stock(db, feed_id)
    if not db_obj:
        logger.warning("Delete of unknown stock item", stock_id=feed_id)
        return False

    referenced = db.query(FeedRequest.id).filter(FeedRequest.feed_id == feed_id).first()
    if referenced:
        raise InvalidStateError("Stock item is referenced by feed requests")

    db.delete(db_obj)
    db.commit()

    logger.info("Stock item deleted", stock_id=feed_id)
    return True


def decrement_stock(db: Session, feed_id: int, qty: int, actor: str) -> int:
    """
    Take ``qty`` bags out of a stock item inside the caller's transaction.

    The UPDATE only matches while enough bags remain, so two transactions
    racing for the same item can never push the quantity below zero: the
    loser sees zero affected rows. Nothing is committed here.

    Returns the new quantity.
    """
    if qty < 1:
        raise InvalidStateError("Quantity must be at least 1 bag")

    now = utcnow()
    result = db.execute(
        update(StockItem)
        .where(StockItem.id == feed_id, StockItem.quantity_bags >= qty)
        .values(
            quantity_bags=StockItem.quantity_bags - qty,
            updated_by=actor,
            last_updated=now,
            updated_at=now,
        )
        .execution_options(synchronize_session=False)
    )

    if result.rowcount != 1:
        current = db.query(StockItem.quantity_bags).filter(StockItem.id == feed_id).scalar()
        if current is None:
            raise NotFoundError("Stock item not found")
        raise InsufficientStockError(available=current)

    return db.query(StockItem.quantity_bags).filter(StockItem.id == feed_id).scalar()


def search_stock(
    db: Session,
    q: str,
    type: Optional[str] = None,
    limit: int = 20,
) -> List[StockItem]:
    pattern = f"%{q}%"
    query = db.query(StockItem).filter(
        or_(StockItem.name.ilike(pattern), StockItem.type.ilike(pattern))
    )
    if type:
        query = query.filter(StockItem.type.ilike(f"%{type}%"))
    return query.order_by(StockItem.name.asc()).limit(limit).all()


def stock_stats(db: Session) -> StockStats:
    total_items = db.query(func.count(StockItem.id)).scalar() or 0
    low_stock_count = (
        db.query(func.count(StockItem.id))
        .filter(StockItem.quantity_bags < settings.LOW_STOCK_THRESHOLD)
        .scalar()
        or 0
    )
    total_bags = db.query(func.sum(StockItem.quantity_bags)).scalar() or 0
    total_value = (
        db.query(func.sum(StockItem.quantity_bags * StockItem.selling_price)).scalar()
        or 0
    )
    rows = (
        db.query(
            StockItem.type,
            func.count(StockItem.id),
            func.sum(StockItem.quantity_bags),
        )
        .group_by(StockItem.type)
        .order_by(StockItem.type)
        .all()
    )

    return StockStats(
        total_items=total_items,
        low_stock_count=low_stock_count,
        total_bags=int(total_bags),
        total_value=float(total_value),
        type_breakdown=[
            StockTypeBreakdown(type=t, count=c, total_bags=int(b or 0))
            for t, c, b in rows
        ],
    )
