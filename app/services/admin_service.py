from typing import List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.errors import DuplicateError
from app.core.logging import get_logger
from app.core.security import hash_password, verify_password
from app.models.admin import Admin
from app.models.base import utcnow
from app.schemas.admin import AdminCreate, AdminUpdate

logger = get_logger(module="admin_service")


def authenticate(db: Session, mobile: str, password: str) -> Optional[Admin]:
    admin = get_admin_by_mobile(db, mobile)
    if not admin or not verify_password(password, admin.password_hash):
        logger.warning("Failed login", mobile=mobile)
        return None
    return admin


def get_admin(db: Session, admin_id: int) -> Optional[Admin]:
    return db.get(Admin, admin_id)


def get_admin_by_mobile(db: Session, mobile: str) -> Optional[Admin]:
    return db.query(Admin).filter(Admin.mobile == mobile).first()


def list_admins(db: Session) -> List[Admin]:
    return db.query(Admin).order_by(Admin.created_at.desc()).all()


def create_admin(db: Session, admin_in: AdminCreate, actor: str) -> Admin:
    now = utcnow()
    db_obj = Admin(
        name=admin_in.name,
        mobile=admin_in.mobile,
        password_hash=hash_password(admin_in.password),
        role=admin_in.role,
        created_by=actor,
        created_at=now,
        updated_at=now,
    )
    db.add(db_obj)
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise DuplicateError("Admin with this mobile already exists") from exc
    db.refresh(db_obj)

    logger.info("Admin created", admin_id=db_obj.id, role=db_obj.role, created_by=actor)
    return db_obj


def update_admin(db: Session, admin_id: int, admin_in: AdminUpdate) -> Optional[Admin]:
    db_obj = get_admin(db, admin_id)
    if not db_obj:
        return None

    update_data = admin_in.model_dump(exclude_unset=True)
    password = update_data.pop("password", None)
    for field, value in update_data.items():
        setattr(db_obj, field, value)
    if password:
        db_obj.password_hash = hash_password(password)
    db_obj.updated_at = utcnow()

    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise DuplicateError("Admin with this mobile already exists") from exc
    db.refresh(db_obj)

    logger.info("Admin updated", admin_id=admin_id, password_changed=bool(password))
    return db_obj


def delete_admin(db: Session, admin_id: int) -> bool:
    db_obj = get_admin(db, admin_id)
    if not db_obj:
        return False

    db.delete(db_obj)
    db.commit()
    logger.info("Admin deleted", admin_id=admin_id)
    return True
