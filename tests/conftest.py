"""
Shared pytest fixtures: in-memory SQLite database, seeded rows and an
authenticated API client.
"""
import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("SECRET_KEY", "test-secret")

from decimal import Decimal  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from app.core.security import create_access_token, hash_password  # noqa: E402
from app.db import get_db  # noqa: E402
from app.main import app  # noqa: E402
from app.models import Admin, Base, Farmer, StockItem  # noqa: E402
from app.models.base import utcnow  # noqa: E402


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


def _admin(name: str, mobile: str, role: str) -> Admin:
    now = utcnow()
    return Admin(
        name=name,
        mobile=mobile,
        password_hash=hash_password("secret123"),
        role=role,
        created_by="tests",
        created_at=now,
        updated_at=now,
    )


@pytest.fixture
def superadmin(db):
    admin = _admin("Root", "9000000000", "superadmin")
    db.add(admin)
    db.commit()
    db.refresh(admin)
    return admin


@pytest.fixture
def admin(db):
    admin = _admin("admin1", "9000000001", "admin")
    db.add(admin)
    db.commit()
    db.refresh(admin)
    return admin


@pytest.fixture
def make_farmer(db):
    counter = {"n": 0}

    def _make(status: str = "Active", **kwargs) -> Farmer:
        counter["n"] += 1
        now = utcnow()
        farmer = Farmer(
            full_name=kwargs.pop("full_name", f"Farmer {counter['n']}"),
            mobile=kwargs.pop("mobile", f"98000000{counter['n']:02d}"),
            code=kwargs.pop("code", f"DF{counter['n']:03d}"),
            status=status,
            created_by="tests",
            created_at=now,
            updated_at=now,
            **kwargs,
        )
        db.add(farmer)
        db.commit()
        db.refresh(farmer)
        return farmer

    return _make


@pytest.fixture
def make_stock(db):
    def _make(
        quantity_bags: int = 10,
        selling_price: str = "150",
        purchase_price: str = "120",
        name: str = "Cattle Feed Premium",
    ) -> StockItem:
        now = utcnow()
        item = StockItem(
            name=name,
            type="Cattle Feed",
            quantity_bags=quantity_bags,
            bag_weight=Decimal("50"),
            selling_price=Decimal(selling_price),
            purchase_price=Decimal(purchase_price),
            updated_by="tests",
            last_updated=now,
            created_at=now,
            updated_at=now,
        )
        db.add(item)
        db.commit()
        db.refresh(item)
        return item

    return _make


@pytest.fixture
def farmer(make_farmer):
    return make_farmer()


@pytest.fixture
def stock(make_stock):
    return make_stock()


@pytest.fixture
def client(session_factory):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


def auth_headers(admin: Admin) -> dict:
    token = create_access_token({"sub": str(admin.id), "name": admin.name, "role": admin.role})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def admin_headers(admin):
    return auth_headers(admin)


@pytest.fixture
def superadmin_headers(superadmin):
    return auth_headers(superadmin)
