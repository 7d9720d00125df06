"""
Stock decrement guard and the default listing window.
"""
from datetime import date

import pytest

from app.core.errors import InsufficientStockError, InvalidStateError, NotFoundError
from app.models import StockItem
from app.schemas.stock import StockCreate, StockUpdate
from app.services import stock_service
from app.services.feed_request_service import default_date_range


# =============================================================================
# DECREMENT
# =============================================================================

class TestDecrement:
    def test_decrement_returns_remaining(self, db, stock):
        remaining = stock_service.decrement_stock(db, stock.id, 4, actor="admin1")
        db.commit()

        assert remaining == 6
        db.expire_all()
        assert db.get(StockItem, stock.id).quantity_bags == 6

    def test_decrement_to_exactly_zero(self, db, stock):
        assert stock_service.decrement_stock(db, stock.id, 10, actor="admin1") == 0
        db.commit()

    def test_refuses_more_than_available(self, db, stock):
        with pytest.raises(InsufficientStockError) as exc_info:
            stock_service.decrement_stock(db, stock.id, 11, actor="admin1")
        db.rollback()

        assert exc_info.value.available == 10

    def test_stale_read_cannot_overdraw(self, db, session_factory, stock):
        # db holds a row that still says 10 bags
        assert db.get(StockItem, stock.id).quantity_bags == 10

        other = session_factory()
        try:
            stock_service.decrement_stock(other, stock.id, 8, actor="other")
            other.commit()
        finally:
            other.close()

        with pytest.raises(InsufficientStockError) as exc_info:
            stock_service.decrement_stock(db, stock.id, 5, actor="admin1")
        db.rollback()

        assert exc_info.value.available == 2
        db.expire_all()
        assert db.get(StockItem, stock.id).quantity_bags == 2

    def test_unknown_item(self, db):
        with pytest.raises(NotFoundError):
            stock_service.decrement_stock(db, 4242, 1, actor="admin1")

    def test_zero_quantity(self, db, stock):
        with pytest.raises(InvalidStateError):
            stock_service.decrement_stock(db, stock.id, 0, actor="admin1")


# =============================================================================
# CRUD / QUERIES
# =============================================================================

def test_create_and_update_record_actor(db):
    item = stock_service.create_stock(
        db,
        StockCreate(
            name="Mineral Mix",
            type="Supplement",
            quantity_bags=30,
            purchase_price=80,
            selling_price=95.5,
        ),
        actor="admin1",
    )
    assert item.updated_by == "admin1"
    assert float(item.bag_weight) == 50

    updated = stock_service.update_stock(
        db, item.id, StockUpdate(selling_price=99), actor="admin2"
    )
    assert float(updated.selling_price) == 99
    assert updated.updated_by == "admin2"


def test_update_unknown_returns_none(db):
    assert stock_service.update_stock(db, 99, StockUpdate(quantity_bags=1), actor="a") is None


def test_low_stock_threshold(db, make_stock):
    make_stock(quantity_bags=5, name="Calf Starter")
    make_stock(quantity_bags=50, name="Cattle Feed Gold")

    low = stock_service.list_low_stock(db, threshold=20)

    assert [item.name for item in low] == ["Calf Starter"]


def test_delete_referenced_stock_is_refused(db, farmer, stock):
    from app.services.feed_request_service import create_feed_request

    create_feed_request(db, farmer.id, stock.id, 1, actor="admin1")

    with pytest.raises(InvalidStateError):
        stock_service.delete_stock(db, stock.id)


def test_stats(db, make_stock):
    make_stock(quantity_bags=5, selling_price="100", name="A")
    make_stock(quantity_bags=30, selling_price="10", name="B")

    stats = stock_service.stock_stats(db)

    assert stats.total_items == 2
    assert stats.total_bags == 35
    assert stats.low_stock_count == 1
    assert stats.total_value == 800


# =============================================================================
# DEFAULT DATE WINDOW
# =============================================================================

@pytest.mark.parametrize(
    "today, expected",
    [
        (date(2024, 3, 5), (date(2024, 3, 1), date(2024, 3, 10))),
        (date(2024, 3, 10), (date(2024, 3, 1), date(2024, 3, 10))),
        (date(2024, 3, 15), (date(2024, 3, 11), date(2024, 3, 20))),
        (date(2024, 3, 21), (date(2024, 3, 21), date(2024, 3, 31))),
        (date(2024, 2, 25), (date(2024, 2, 21), date(2024, 2, 29))),
        (date(2023, 2, 25), (date(2023, 2, 21), date(2023, 2, 28))),
        (date(2024, 4, 30), (date(2024, 4, 21), date(2024, 4, 30))),
    ],
)
def test_default_date_range(today, expected):
    assert default_date_range(today) == expected
