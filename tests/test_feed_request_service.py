"""
Feed request lifecycle against a real (SQLite) session.

Run with: pytest tests/test_feed_request_service.py -v
"""
from decimal import Decimal

import pytest
from sqlalchemy import text

from app.core.errors import (
    InsufficientStockError,
    IntegrityViolationError,
    InvalidStateError,
    NotFoundError,
)
from app.models import FeedHistoryEntry, FeedRequest, StockItem
from app.services import feed_request_service as svc


def _history_count(db) -> int:
    return db.query(FeedHistoryEntry).count()


def _quantity(db, stock_id: int) -> int:
    db.expire_all()
    return db.get(StockItem, stock_id).quantity_bags


# =============================================================================
# CREATE
# =============================================================================

class TestCreate:
    def test_price_uses_selling_price_at_creation(self, db, farmer, stock):
        req = svc.create_feed_request(db, farmer.id, stock.id, 4, actor="admin1")

        assert req.status == "Pending"
        assert req.price == Decimal("600")
        assert req.feed_price_at_creation == Decimal("150")
        assert req.created_by == "admin1"
        assert req.approved_by is None
        assert req.selling_price_at_approval is None
        assert req.purchase_price_at_approval is None
        assert req.total_profit_at_approval is None

    def test_creation_does_not_reserve_stock(self, db, farmer, stock):
        svc.create_feed_request(db, farmer.id, stock.id, 4, actor="admin1")
        assert _quantity(db, stock.id) == 10

    def test_unknown_farmer(self, db, stock):
        with pytest.raises(NotFoundError, match="Farmer not found"):
            svc.create_feed_request(db, 999, stock.id, 1, actor="admin1")

    def test_unknown_feed(self, db, farmer):
        with pytest.raises(NotFoundError, match="Feed not found"):
            svc.create_feed_request(db, farmer.id, 999, 1, actor="admin1")

    def test_inactive_farmer(self, db, make_farmer, stock):
        inactive = make_farmer(status="Inactive")
        with pytest.raises(InvalidStateError):
            svc.create_feed_request(db, inactive.id, stock.id, 1, actor="admin1")
        assert db.query(FeedRequest).count() == 0

    def test_zero_bags(self, db, farmer, stock):
        with pytest.raises(InvalidStateError):
            svc.create_feed_request(db, farmer.id, stock.id, 0, actor="admin1")

    def test_insufficient_stock_reports_available(self, db, farmer, stock):
        with pytest.raises(InsufficientStockError) as exc_info:
            svc.create_feed_request(db, farmer.id, stock.id, 11, actor="admin1")

        assert exc_info.value.available == 10
        assert "Only 10 bags available" in exc_info.value.message


# =============================================================================
# APPROVE
# =============================================================================

class TestApprove:
    def test_approval_scenario(self, db, farmer, stock):
        req = svc.create_feed_request(db, farmer.id, stock.id, 4, actor="admin1")

        approved = svc.approve_feed_request(db, req.id, actor="admin1")

        assert approved.status == "Approved"
        assert approved.approved_by == "admin1"
        assert approved.approved_at is not None
        assert approved.selling_price_at_approval == Decimal("150")
        assert approved.purchase_price_at_approval == Decimal("120")
        assert approved.total_profit_at_approval == Decimal("120")
        assert _quantity(db, stock.id) == 6

        history = db.query(FeedHistoryEntry).all()
        assert len(history) == 1
        entry = history[0]
        assert entry.farmer_id == farmer.id
        assert entry.bags == 4
        assert entry.price == Decimal("600")
        assert entry.approved_by == "admin1"
        assert entry.feed_type == stock.name

    def test_stock_updated_by_approver(self, db, farmer, stock):
        req = svc.create_feed_request(db, farmer.id, stock.id, 2, actor="clerk")
        svc.approve_feed_request(db, req.id, actor="admin2")

        db.expire_all()
        assert db.get(StockItem, stock.id).updated_by == "admin2"

    def test_snapshot_uses_price_at_approval_time(self, db, farmer, stock):
        req = svc.create_feed_request(db, farmer.id, stock.id, 4, actor="admin1")

        stock.selling_price = Decimal("160")
        stock.purchase_price = Decimal("125")
        db.commit()

        approved = svc.approve_feed_request(db, req.id, actor="admin1")

        assert approved.feed_price_at_creation == Decimal("150")
        assert approved.price == Decimal("600")
        assert approved.selling_price_at_approval == Decimal("160")
        assert approved.purchase_price_at_approval == Decimal("125")
        assert approved.total_profit_at_approval == Decimal("140")

    def test_snapshot_is_frozen_after_commit(self, db, farmer, stock):
        req = svc.create_feed_request(db, farmer.id, stock.id, 4, actor="admin1")
        svc.approve_feed_request(db, req.id, actor="admin1")

        stock = db.get(StockItem, stock.id)
        stock.selling_price = Decimal("999")
        db.commit()

        again = svc.get_feed_request(db, req.id)
        assert again.selling_price_at_approval == Decimal("150")
        assert again.total_profit_at_approval == Decimal("120")

    def test_second_request_overdraws(self, db, farmer, stock):
        first = svc.create_feed_request(db, farmer.id, stock.id, 6, actor="admin1")
        second = svc.create_feed_request(db, farmer.id, stock.id, 6, actor="admin1")

        svc.approve_feed_request(db, first.id, actor="admin1")
        assert _quantity(db, stock.id) == 4

        with pytest.raises(InsufficientStockError) as exc_info:
            svc.approve_feed_request(db, second.id, actor="admin1")

        assert exc_info.value.available == 4
        assert _quantity(db, stock.id) == 4
        assert svc.get_feed_request(db, second.id).status == "Pending"
        assert _history_count(db) == 1

    def test_double_approval_is_a_noop_error(self, db, farmer, stock):
        req = svc.create_feed_request(db, farmer.id, stock.id, 4, actor="admin1")
        svc.approve_feed_request(db, req.id, actor="admin1")

        with pytest.raises(InvalidStateError, match="already processed"):
            svc.approve_feed_request(db, req.id, actor="admin2")

        assert _quantity(db, stock.id) == 6
        assert _history_count(db) == 1
        assert svc.get_feed_request(db, req.id).approved_by == "admin1"

    def test_approving_rejected_request(self, db, farmer, stock):
        req = svc.create_feed_request(db, farmer.id, stock.id, 4, actor="admin1")
        svc.reject_feed_request(db, req.id, actor="admin1")

        with pytest.raises(InvalidStateError):
            svc.approve_feed_request(db, req.id, actor="admin1")

        assert _quantity(db, stock.id) == 10
        assert _history_count(db) == 0

    def test_unknown_request(self, db):
        with pytest.raises(NotFoundError):
            svc.approve_feed_request(db, 12345, actor="admin1")

    def test_inactive_farmer_is_not_rechecked(self, db, farmer, stock):
        req = svc.create_feed_request(db, farmer.id, stock.id, 3, actor="admin1")
        farmer.status = "Inactive"
        db.commit()

        approved = svc.approve_feed_request(db, req.id, actor="admin1")
        assert approved.status == "Approved"

    def test_missing_stock_is_an_integrity_violation(self, db, farmer, stock):
        req_id = svc.create_feed_request(db, farmer.id, stock.id, 3, actor="admin1").id
        stock_id = stock.id
        db.execute(text("DELETE FROM stock WHERE id = :id"), {"id": stock_id})
        db.commit()
        db.expunge_all()

        with pytest.raises(IntegrityViolationError) as exc_info:
            svc.approve_feed_request(db, req_id, actor="admin1")

        assert exc_info.value.status_code == 500
        assert db.get(FeedRequest, req_id).status == "Pending"
        assert _history_count(db) == 0

    def test_failure_inside_transaction_rolls_everything_back(
        self, db, farmer, stock, monkeypatch
    ):
        req = svc.create_feed_request(db, farmer.id, stock.id, 4, actor="admin1")

        def boom(*args, **kwargs):
            raise RuntimeError("connection dropped")

        monkeypatch.setattr(svc, "_mark_processed", boom)

        with pytest.raises(RuntimeError):
            svc.approve_feed_request(db, req.id, actor="admin1")

        assert _quantity(db, stock.id) == 10
        assert _history_count(db) == 0
        pending = svc.get_feed_request(db, req.id)
        assert pending.status == "Pending"
        assert pending.selling_price_at_approval is None


# =============================================================================
# REJECT / LIST
# =============================================================================

class TestReject:
    def test_reject_pending(self, db, farmer, stock):
        req = svc.create_feed_request(db, farmer.id, stock.id, 4, actor="admin1")

        rejected = svc.reject_feed_request(db, req.id, actor="admin2")

        assert rejected.status == "Rejected"
        assert rejected.approved_by == "admin2"
        assert rejected.approved_at is not None
        assert rejected.selling_price_at_approval is None
        assert rejected.total_profit_at_approval is None
        assert _quantity(db, stock.id) == 10
        assert _history_count(db) == 0

    def test_reject_twice(self, db, farmer, stock):
        req = svc.create_feed_request(db, farmer.id, stock.id, 4, actor="admin1")
        svc.reject_feed_request(db, req.id, actor="admin1")

        with pytest.raises(InvalidStateError):
            svc.reject_feed_request(db, req.id, actor="admin1")

    def test_reject_approved(self, db, farmer, stock):
        req = svc.create_feed_request(db, farmer.id, stock.id, 4, actor="admin1")
        svc.approve_feed_request(db, req.id, actor="admin1")

        with pytest.raises(InvalidStateError):
            svc.reject_feed_request(db, req.id, actor="admin1")
        assert svc.get_feed_request(db, req.id).status == "Approved"

    def test_reject_unknown(self, db):
        with pytest.raises(NotFoundError):
            svc.reject_feed_request(db, 777, actor="admin1")


def test_list_pending_only_returns_pending(db, farmer, stock):
    a = svc.create_feed_request(db, farmer.id, stock.id, 1, actor="admin1")
    b = svc.create_feed_request(db, farmer.id, stock.id, 1, actor="admin1")
    c = svc.create_feed_request(db, farmer.id, stock.id, 1, actor="admin1")
    svc.approve_feed_request(db, a.id, actor="admin1")
    svc.reject_feed_request(db, b.id, actor="admin1")

    pending = svc.list_pending_requests(db)

    assert [r.id for r in pending] == [c.id]
    assert pending[0].farmer.id == farmer.id
    assert pending[0].feed.id == stock.id
