from datetime import datetime
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from worklog.core.dates import ensure_aware
from worklog.schemas.activity import Activity
from worklog.schemas.project import Project
from worklog.schemas.user import User


class TimesheetMetaField(BaseModel):
    name: str = Field(..., min_length=1, max_length=50)
    value: Optional[str] = None
    visible: bool = False

    model_config = ConfigDict(from_attributes=True)


def _check_period(begin: Optional[datetime], end: Optional[datetime]) -> None:
    if begin is not None and end is not None and ensure_aware(end) < ensure_aware(begin):
        raise ValueError("End date must not be earlier than begin date")


class TimesheetBase(BaseModel):
    begin: datetime
    end: Optional[datetime] = None
    description: Optional[str] = None
    fixed_rate: Optional[float] = Field(default=None, ge=0)
    hourly_rate: Optional[float] = Field(default=None, ge=0)
    exported: bool = False


class TimesheetCreate(TimesheetBase):
    project_id: int
    activity_id: int
    user_id: Optional[int] = None  # managers may record time for others
    duration: Optional[int] = Field(default=None, ge=0)  # in seconds
    rate: Optional[float] = Field(default=None, ge=0)
    tags: List[str] = []
    meta_fields: List[TimesheetMetaField] = []

    @model_validator(mode="after")
    def check_period(self) -> "TimesheetCreate":
        _check_period(self.begin, self.end)
        return self


class TimesheetUpdate(BaseModel):
    begin: Optional[datetime] = None
    end: Optional[datetime] = None  # explicit null reopens the entry
    project_id: Optional[int] = None
    activity_id: Optional[int] = None
    description: Optional[str] = None
    duration: Optional[int] = Field(default=None, ge=0)
    rate: Optional[float] = Field(default=None, ge=0)
    fixed_rate: Optional[float] = Field(default=None, ge=0)
    hourly_rate: Optional[float] = Field(default=None, ge=0)
    exported: Optional[bool] = None
    tags: Optional[List[str]] = None

    @model_validator(mode="after")
    def check_period(self) -> "TimesheetUpdate":
        _check_period(self.begin, self.end)
        return self


class TimesheetStop(BaseModel):
    end: Optional[datetime] = None
    description: Optional[str] = None


class Timesheet(BaseModel):
    id: int
    begin: datetime
    end: Optional[datetime] = None
    timezone: str
    duration: int
    rate: float
    fixed_rate: Optional[float] = None
    hourly_rate: Optional[float] = None
    description: Optional[str] = None
    exported: bool
    user_id: int
    project_id: int
    activity_id: int
    tags: List[str] = []
    meta_fields: List[TimesheetMetaField] = []
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

    @field_validator("tags", mode="before")
    @classmethod
    def tag_names(cls, v: Any) -> List[str]:
        return [tag if isinstance(tag, str) else tag.name for tag in v]


class TimesheetWithDetails(Timesheet):
    user: Optional[User] = None
    project: Optional[Project] = None
    activity: Optional[Activity] = None


class TimesheetSummary(BaseModel):
    total_entries: int
    total_duration: int  # in seconds
    total_hours: float
    total_rate: float
    exported_entries: int
