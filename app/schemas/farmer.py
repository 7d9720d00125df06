from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator


class FarmerBase(BaseModel):
    full_name: str = Field(min_length=1)
    mobile: str = Field(pattern=r"^[0-9]{10}$", description="10-digit mobile number")
    code: str = Field(min_length=1, description="Dairy code")
    email: Optional[EmailStr] = None
    status: Literal["Active", "Inactive"] = "Active"


class FarmerCreate(FarmerBase):
    pass


class FarmerUpdate(BaseModel):
    full_name: Optional[str] = Field(default=None, min_length=1)
    mobile: Optional[str] = Field(default=None, pattern=r"^[0-9]{10}$")
    code: Optional[str] = Field(default=None, min_length=1)
    email: Optional[EmailStr] = None
    status: Optional[Literal["Active", "Inactive"]] = None

    model_config = ConfigDict(extra="forbid")

    @field_validator("full_name", "mobile", "code", "status")
    @classmethod
    def not_null(cls, value):
        # omit the field to leave it unchanged; only email may be cleared
        if value is None:
            raise ValueError("may not be null")
        return value


class FarmerRead(FarmerBase):
    id: int
    created_by: str
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class FarmerStats(BaseModel):
    total: int
    active: int
    inactive: int
    recent: int  # registered in the last 30 days


class FeedHistoryRead(BaseModel):
    id: int
    farmer_id: int
    date: datetime
    feed_type: str
    bags: int
    price: float
    approved_by: str

    model_config = ConfigDict(from_attributes=True)
