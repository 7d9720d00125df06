from typing import List, Literal, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from app.api.deps import require_admin
from app.core.logging import get_logger
from app.db import get_db
from app.models.admin import Admin
from app.schemas.farmer import (
    FarmerCreate,
    FarmerRead,
    FarmerStats,
    FarmerUpdate,
    FeedHistoryRead,
)
from app.services import farmer_service

router = APIRouter(prefix="/farmers", tags=["farmers"])
logger = get_logger(module="farmers")

FARMER_NOT_FOUND = "Farmer not found"


@router.get("/", response_model=List[FarmerRead])
def list_farmers(
    status_filter: Optional[Literal["Active", "Inactive"]] = Query(default=None, alias="status"),
    search: Optional[str] = None,
    skip: int = Query(default=0, ge=0),
    limit: int = Query(default=100, ge=1, le=500),
    db: Session = Depends(get_db),
    current_admin: Admin = Depends(require_admin),
):
    farmers = farmer_service.list_farmers(
        db=db, status=status_filter, search=search, skip=skip, limit=limit
    )
    logger.info(
        "Listing farmers",
        status=status_filter,
        search=search,
        count=len(farmers),
    )
    return farmers


@router.get("/search", response_model=List[FarmerRead])
def search_farmers(
    q: str = Query(min_length=2),
    status_filter: Optional[Literal["Active", "Inactive"]] = Query(default=None, alias="status"),
    limit: int = Query(default=20, ge=1, le=100),
    db: Session = Depends(get_db),
    current_admin: Admin = Depends(require_admin),
):
    return farmer_service.list_farmers(db=db, status=status_filter, search=q, limit=limit)


@router.get("/stats", response_model=FarmerStats)
def farmer_stats(
    db: Session = Depends(get_db),
    current_admin: Admin = Depends(require_admin),
):
    return farmer_service.farmer_stats(db)


@router.get("/{farmer_id}", response_model=FarmerRead)
def get_farmer(
    farmer_id: int,
    db: Session = Depends(get_db),
    current_admin: Admin = Depends(require_admin),
):
    farmer = farmer_service.get_farmer(db=db, farmer_id=farmer_id)
    if not farmer:
        logger.warning("Farmer not found", farmer_id=farmer_id)
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=FARMER_NOT_FOUND)
    return farmer


@router.get("/{farmer_id}/history", response_model=List[FeedHistoryRead])
def farmer_history(
    farmer_id: int,
    db: Session = Depends(get_db),
    current_admin: Admin = Depends(require_admin),
):
    if not farmer_service.get_farmer(db=db, farmer_id=farmer_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=FARMER_NOT_FOUND)
    return farmer_service.list_farmer_history(db=db, farmer_id=farmer_id)


@router.post("/", response_model=FarmerRead, status_code=status.HTTP_201_CREATED)
def create_farmer(
    farmer_in: FarmerCreate,
    db: Session = Depends(get_db),
    current_admin: Admin = Depends(require_admin),
):
    return farmer_service.create_farmer(db=db, farmer_in=farmer_in, actor=current_admin.name)


@router.patch("/{farmer_id}", response_model=FarmerRead)
def update_farmer(
    farmer_id: int,
    farmer_in: FarmerUpdate,
    db: Session = Depends(get_db),
    current_admin: Admin = Depends(require_admin),
):
    farmer = farmer_service.update_farmer(db=db, farmer_id=farmer_id, farmer_in=farmer_in)
    if not farmer:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=FARMER_NOT_FOUND)
    return farmer


@router.patch("/{farmer_id}/toggle-status", response_model=FarmerRead)
def toggle_farmer_status(
    farmer_id: int,
    db: Session = Depends(get_db),
    current_admin: Admin = Depends(require_admin),
):
    farmer = farmer_service.toggle_farmer_status(db=db, farmer_id=farmer_id)
    if not farmer:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=FARMER_NOT_FOUND)
    return farmer


@router.delete("/{farmer_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_farmer(
    farmer_id: int,
    db: Session = Depends(get_db),
    current_admin: Admin = Depends(require_admin),
):
    if not farmer_service.delete_farmer(db=db, farmer_id=farmer_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=FARMER_NOT_FOUND)

    logger.info("Farmer removed", farmer_id=farmer_id, deleted_by=current_admin.name)
