from datetime import datetime
from typing import Optional

from pydantic import BaseModel, EmailStr, ConfigDict, Field

from worklog.models.user import UserRole


class UserBase(BaseModel):
    email: EmailStr
    username: str = Field(..., min_length=2, max_length=180)
    alias: Optional[str] = Field(default=None, max_length=60)
    role: UserRole = UserRole.USER
    is_active: bool = True
    timezone: Optional[str] = Field(default=None, max_length=64)
    hourly_rate: Optional[float] = Field(default=None, ge=0)


class UserCreate(UserBase):
    password: str = Field(..., min_length=8)


class UserUpdate(BaseModel):
    email: Optional[EmailStr] = None
    alias: Optional[str] = Field(default=None, max_length=60)
    role: Optional[UserRole] = None
    is_active: Optional[bool] = None
    timezone: Optional[str] = Field(default=None, max_length=64)
    hourly_rate: Optional[float] = Field(default=None, ge=0)


class UserInDBBase(UserBase):
    id: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class User(UserInDBBase):
    pass


class UserInDB(UserInDBBase):
    hashed_password: str
