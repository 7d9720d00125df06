from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from app.api.deps import get_current_admin
from app.core.logging import get_logger
from app.core.security import create_access_token
from app.db import get_db
from app.models.admin import Admin
from app.schemas.admin import AdminRead, LoginRequest, TokenResponse
from app.services import admin_service

router = APIRouter(prefix="/auth", tags=["auth"])
logger = get_logger(module="auth")


@router.post("/login", response_model=TokenResponse)
def login(
    credentials: LoginRequest,
    db: Session = Depends(get_db),
):
    admin = admin_service.authenticate(db, credentials.mobile, credentials.password)
    if not admin:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials",
        )

    token = create_access_token(
        {"sub": str(admin.id), "name": admin.name, "role": admin.role}
    )
    logger.info("Admin logged in", admin_id=admin.id, role=admin.role)
    return TokenResponse(access_token=token, user=AdminRead.model_validate(admin))


@router.get("/profile", response_model=AdminRead)
def get_profile(current_admin: Admin = Depends(get_current_admin)):
    return current_admin
