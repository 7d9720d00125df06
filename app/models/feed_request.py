from __future__ import annotations

import enum
from datetime import datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import DateTime, ForeignKey, Integer, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, utcnow
from .farmer import Farmer
from .stock import StockItem


class RequestStatus(str, enum.Enum):
    PENDING = "Pending"
    APPROVED = "Approved"
    REJECTED = "Rejected"


class FeedRequest(Base):
    __tablename__ = "feed_requests"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    farmer_id: Mapped[int] = mapped_column(ForeignKey("farmers.id"), index=True)
    feed_id: Mapped[int] = mapped_column(ForeignKey("stock.id"), index=True)

    qty_bags: Mapped[int] = mapped_column(Integer)
    price: Mapped[Decimal] = mapped_column(Numeric(10, 2))  # qty_bags * selling price at creation
    feed_price_at_creation: Mapped[Decimal] = mapped_column(Numeric(10, 2))
    status: Mapped[str] = mapped_column(
        String(20), default=RequestStatus.PENDING.value, index=True
    )

    # Frozen at approval, read by reports. Never recomputed.
    selling_price_at_approval: Mapped[Optional[Decimal]] = mapped_column(Numeric(10, 2), nullable=True)
    purchase_price_at_approval: Mapped[Optional[Decimal]] = mapped_column(Numeric(10, 2), nullable=True)
    total_profit_at_approval: Mapped[Optional[Decimal]] = mapped_column(Numeric(10, 2), nullable=True)

    created_by: Mapped[str] = mapped_column(String(255))
    # also set on rejection
    approved_by: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    approved_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, index=True)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)

    farmer: Mapped[Optional[Farmer]] = relationship(Farmer)
    feed: Mapped[Optional[StockItem]] = relationship(StockItem)

    def __repr__(self) -> str:
        return (
            f"<FeedRequest id={self.id!r} farmer_id={self.farmer_id!r} "
            f"feed_id={self.feed_id!r} qty={self.qty_bags!r} status={self.status!r}>"
        )

    @property
    def is_pending(self) -> bool:
        return self.status == RequestStatus.PENDING.value
