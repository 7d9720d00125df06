from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from app.api.deps import require_superadmin
from app.core.logging import get_logger
from app.db import get_db
from app.models.admin import Admin
from app.schemas.admin import AdminCreate, AdminRead, AdminUpdate
from app.services import admin_service

router = APIRouter(prefix="/admins", tags=["admins"])
logger = get_logger(module="admins")


@router.get("/", response_model=List[AdminRead])
def list_admins(
    db: Session = Depends(get_db),
    current_admin: Admin = Depends(require_superadmin),
):
    return admin_service.list_admins(db)


@router.get("/{admin_id}", response_model=AdminRead)
def get_admin(
    admin_id: int,
    db: Session = Depends(get_db),
    current_admin: Admin = Depends(require_superadmin),
):
    admin = admin_service.get_admin(db, admin_id)
    if not admin:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Admin not found")
    return admin


@router.post("/", response_model=AdminRead, status_code=status.HTTP_201_CREATED)
def create_admin(
    admin_in: AdminCreate,
    db: Session = Depends(get_db),
    current_admin: Admin = Depends(require_superadmin),
):
    return admin_service.create_admin(db, admin_in, actor=current_admin.name)


@router.patch("/{admin_id}", response_model=AdminRead)
def update_admin(
    admin_id: int,
    admin_in: AdminUpdate,
    db: Session = Depends(get_db),
    current_admin: Admin = Depends(require_superadmin),
):
    admin = admin_service.update_admin(db, admin_id, admin_in)
    if not admin:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Admin not found")
    return admin


@router.delete("/{admin_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_admin(
    admin_id: int,
    db: Session = Depends(get_db),
    current_admin: Admin = Depends(require_superadmin),
):
    if admin_id == current_admin.id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="You cannot delete your own account",
        )
    if not admin_service.delete_admin(db, admin_id):
        logger.warning("Delete of unknown admin", admin_id=admin_id)
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Admin not found")
