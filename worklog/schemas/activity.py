from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class ActivityBase(BaseModel):
    name: str = Field(..., min_length=2, max_length=150)
    comment: Optional[str] = None
    visible: bool = True
    fixed_rate: Optional[float] = Field(default=None, ge=0)
    hourly_rate: Optional[float] = Field(default=None, ge=0)
    project_id: Optional[int] = None  # None for global activities


class ActivityCreate(ActivityBase):
    pass


class ActivityUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=2, max_length=150)
    comment: Optional[str] = None
    visible: Optional[bool] = None
    fixed_rate: Optional[float] = Field(default=None, ge=0)
    hourly_rate: Optional[float] = Field(default=None, ge=0)


class Activity(ActivityBase):
    id: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)
