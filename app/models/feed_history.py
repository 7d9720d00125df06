from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from sqlalchemy import DateTime, ForeignKey, Integer, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, utcnow


class FeedHistoryEntry(Base):
    """Append-only audit row written once per approved feed request."""

    __tablename__ = "feed_history"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    farmer_id: Mapped[int] = mapped_column(ForeignKey("farmers.id"), index=True)
    date: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    feed_type: Mapped[str] = mapped_column(String(255))  # stock name at approval time
    bags: Mapped[int] = mapped_column(Integer)
    price: Mapped[Decimal] = mapped_column(Numeric(10, 2))
    approved_by: Mapped[str] = mapped_column(String(255))

    def __repr__(self) -> str:
        return (
            f"<FeedHistoryEntry id={self.id!r} farmer_id={self.farmer_id!r} "
            f"feed_type={self.feed_type!r} bags={self.bags!r}>"
        )
