from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class StockBase(BaseModel):
    name: str = Field(min_length=1)
    type: str = Field(min_length=1)  # "Cattle Feed", "Mineral Mix"...
    quantity_bags: int = Field(ge=0)
    bag_weight: float = Field(default=50, ge=0.1)  # kg
    purchase_price: float = Field(ge=0)
    selling_price: float = Field(ge=0)


class StockCreate(StockBase):
    pass


class StockUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1)
    type: Optional[str] = Field(default=None, min_length=1)
    quantity_bags: Optional[int] = Field(default=None, ge=0)
    bag_weight: Optional[float] = Field(default=None, ge=0.1)
    purchase_price: Optional[float] = Field(default=None, ge=0)
    selling_price: Optional[float] = Field(default=None, ge=0)

    model_config = ConfigDict(extra="forbid")

    @field_validator("*")
    @classmethod
    def not_null(cls, value):
        if value is None:
            raise ValueError("may not be null")
        return value


class StockRead(StockBase):
    id: int
    last_updated: datetime
    updated_by: str

    model_config = ConfigDict(from_attributes=True)


class StockTypeBreakdown(BaseModel):
    type: str
    count: int
    total_bags: int


class StockStats(BaseModel):
    total_items: int
    low_stock_count: int
    total_bags: int
    total_value: float
    type_breakdown: List[StockTypeBreakdown]
