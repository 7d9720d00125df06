from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class LoginRequest(BaseModel):
    mobile: str = Field(pattern=r"^[0-9]{10}$")
    password: str = Field(min_length=6)


class AdminCreate(BaseModel):
    name: str = Field(min_length=1)
    mobile: str = Field(pattern=r"^[0-9]{10}$")
    password: str = Field(min_length=6)
    role: Literal["admin", "superadmin"] = "admin"


class AdminUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1)
    mobile: Optional[str] = Field(default=None, pattern=r"^[0-9]{10}$")
    password: Optional[str] = Field(default=None, min_length=6)

    model_config = ConfigDict(extra="forbid")

    @field_validator("*")
    @classmethod
    def not_null(cls, value):
        if value is None:
            raise ValueError("may not be null")
        return value


class AdminRead(BaseModel):
    id: int
    name: str
    mobile: str
    role: str
    created_by: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: AdminRead
