import os
from decimal import Decimal

from sqlalchemy.orm import Session

from app.core.logging import get_logger, setup_logging
from app.core.security import hash_password
from app.db import SessionLocal, create_db_and_tables
from app.models.admin import Admin, AdminRole
from app.models.base import utcnow
from app.models.farmer import Farmer, FarmerStatus
from app.models.stock import StockItem

logger = get_logger(module="seed_data")

SEED_ACTOR = "system"


def seed_superadmin(db: Session) -> None:
    if db.query(Admin).filter(Admin.role == AdminRole.SUPERADMIN.value).count() > 0:
        return

    now = utcnow()
    db.add(
        Admin(
            name=os.getenv("SUPERADMIN_NAME", "Super Admin"),
            mobile=os.getenv("SUPERADMIN_MOBILE", "9999999999"),
            password_hash=hash_password(os.getenv("SUPERADMIN_PASSWORD", "admin123")),
            role=AdminRole.SUPERADMIN.value,
            created_by=SEED_ACTOR,
            created_at=now,
            updated_at=now,
        )
    )
    db.commit()


def seed_farmers(db: Session) -> None:
    if db.query(Farmer).count() > 0:
        return

    now = utcnow()
    farmers = [
        Farmer(
            full_name="Ramesh Patil",
            mobile="9876543210",
            code="DF001",
            email="ramesh.patil@example.com",
            status=FarmerStatus.ACTIVE.value,
        ),
        Farmer(
            full_name="Sunita Jadhav",
            mobile="9876543211",
            code="DF002",
            status=FarmerStatus.ACTIVE.value,
        ),
        Farmer(
            full_name="Vijay Shinde",
            mobile="9876543212",
            code="DF003",
            status=FarmerStatus.INACTIVE.value,
        ),
    ]
    for farmer in farmers:
        farmer.created_by = SEED_ACTOR
        farmer.created_at = now
        farmer.updated_at = now

    db.add_all(farmers)
    db.commit()


def seed_stock(db: Session) -> None:
    if db.query(StockItem).count() > 0:
        return

    now = utcnow()
    items = [
        StockItem(
            name="Godrej Cattle Feed",
            type="Cattle Feed",
            quantity_bags=120,
            bag_weight=Decimal("50"),
            purchase_price=Decimal("1150"),
            selling_price=Decimal("1250"),
        ),
        StockItem(
            name="Mineral Mixture",
            type="Supplement",
            quantity_bags=40,
            bag_weight=Decimal("25"),
            purchase_price=Decimal("780"),
            selling_price=Decimal("850"),
        ),
        # below the low-stock threshold on purpose
        StockItem(
            name="Cotton Seed Cake",
            type="Oil Cake",
            quantity_bags=12,
            bag_weight=Decimal("50"),
            purchase_price=Decimal("1500"),
            selling_price=Decimal("1620"),
        ),
    ]
    for item in items:
        item.updated_by = SEED_ACTOR
        item.last_updated = now
        item.created_at = now
        item.updated_at = now

    db.add_all(items)
    db.commit()


def main() -> None:
    setup_logging()
    create_db_and_tables()
    db = SessionLocal()
    try:
        seed_superadmin(db)
        seed_farmers(db)
        seed_stock(db)
        logger.info("Seed complete: superadmin, farmers and stock")
    finally:
        db.close()


if __name__ == "__main__":
    main()
