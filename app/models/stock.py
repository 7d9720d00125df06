from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from sqlalchemy import CheckConstraint, DateTime, Integer, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, utcnow


class StockItem(Base):
    __tablename__ = "stock"
    __table_args__ = (
        CheckConstraint("quantity_bags >= 0", name="ck_stock_quantity_non_negative"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), index=True)
    type: Mapped[str] = mapped_column(String(255), index=True)  # "Cattle Feed", "Mineral Mix"...

    quantity_bags: Mapped[int] = mapped_column(Integer, default=0)
    bag_weight: Mapped[Decimal] = mapped_column(Numeric(5, 2), default=Decimal("50"))  # kg
    purchase_price: Mapped[Decimal] = mapped_column(Numeric(10, 2))  # per bag
    selling_price: Mapped[Decimal] = mapped_column(Numeric(10, 2))   # per bag

    last_updated: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_by: Mapped[str] = mapped_column(String(255))
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)

    def __repr__(self) -> str:
        return f"<StockItem id={self.id!r} name={self.name!r} bags={self.quantity_bags!r}>"

    @property
    def margin_per_bag(self) -> Decimal:
        return self.selling_price - self.purchase_price
