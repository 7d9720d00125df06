from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from app.api.deps import require_admin
from app.core.logging import get_logger
from app.db import get_db
from app.models.admin import Admin
from app.schemas.stock import StockCreate, StockRead, StockStats, StockUpdate
from app.services import stock_service

router = APIRouter(prefix="/stock", tags=["stock"])
logger = get_logger(module="stock")

STOCK_NOT_FOUND = "Stock item not found"


@router.get("/", response_model=List[StockRead])
def list_stock(
    search: Optional[str] = None,
    type: Optional[str] = None,
    low_stock: bool = False,
    skip: int = Query(default=0, ge=0),
    limit: int = Query(default=100, ge=1, le=500),
    db: Session = Depends(get_db),
    current_admin: Admin = Depends(require_admin),
):
    items = stock_service.list_stock(
        db=db,
        search=search,
        type=type,
        low_stock=low_stock,
        skip=skip,
        limit=limit,
    )
    logger.info("Listing stock", search=search, type=type, count=len(items))
    return items


@router.get("/low", response_model=List[StockRead])
def low_stock(
    threshold: Optional[int] = Query(default=None, ge=0),
    db: Session = Depends(get_db),
    current_admin: Admin = Depends(require_admin),
):
    return stock_service.list_low_stock(db=db, threshold=threshold)


@router.get("/search", response_model=List[StockRead])
def search_stock(
    q: str = Query(min_length=2),
    type: Optional[str] = None,
    limit: int = Query(default=20, ge=1, le=100),
    db: Session = Depends(get_db),
    current_admin: Admin = Depends(require_admin),
):
    return stock_service.search_stock(db=db, q=q, type=type, limit=limit)


@router.get("/stats", response_model=StockStats)
def stock_stats(
    db: Session = Depends(get_db),
    current_admin: Admin = Depends(require_admin),
):
    return stock_service.stock_stats(db)


@router.get("/{feed_id}", response_model=StockRead)
def get_stock(
    feed_id: int,
    db: Session = Depends(get_db),
    current_admin: Admin = Depends(require_admin),
):
    item = stock_service.get_stock(db=db, feed_id=feed_id)
    if not item:
        logger.warning("Stock item not found", stock_id=feed_id)
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=STOCK_NOT_FOUND)
    return item


@router.post("/", response_model=StockRead, status_code=status.HTTP_201_CREATED)
def create_stock(
    stock_in: StockCreate,
    db: Session = Depends(get_db),
    current_admin: Admin = Depends(require_admin),
):
    return stock_service.create_stock(db=db, stock_in=stock_in, actor=current_admin.name)


@router.patch("/{feed_id}", response_model=StockRead)
def update_stock(
    feed_id: int,
    stock_in: StockUpdate,
    db: Session = Depends(get_db),
    current_admin: Admin = Depends(require_admin),
):
    item = stock_service.update_stock(
        db=db, feed_id=feed_id, stock_in=stock_in, actor=current_admin.name
    )
    if not item:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=STOCK_NOT_FOUND)
    return item


@router.delete("/{feed_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_stock(
    feed_id: int,
    db: Session = Depends(get_db),
    current_admin: Admin = Depends(require_admin),
):
    if not stock_service.delete_stock(db=db, feed_id=feed_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=STOCK_NOT_FOUND)
