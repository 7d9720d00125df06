from datetime import date, datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from app.schemas.farmer import FarmerRead
from app.schemas.stock import StockRead


class FeedRequestCreate(BaseModel):
    farmer_id: int
    feed_id: int
    qty_bags: int = Field(ge=1, description="Quantity must be at least 1 bag")


class FeedRequestRead(BaseModel):
    id: int
    farmer_id: int
    feed_id: int
    qty_bags: int
    price: float
    feed_price_at_creation: float
    status: str

    selling_price_at_approval: Optional[float] = None
    purchase_price_at_approval: Optional[float] = None
    total_profit_at_approval: Optional[float] = None

    created_by: str
    approved_by: Optional[str] = None
    approved_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime

    farmer: Optional[FarmerRead] = None
    feed: Optional[StockRead] = None

    model_config = ConfigDict(from_attributes=True)


class DateRange(BaseModel):
    start_date: Optional[date] = None
    end_date: Optional[date] = None


class FeedRequestList(BaseModel):
    count: int
    data: List[FeedRequestRead]
    date_range: Optional[DateRange] = None
