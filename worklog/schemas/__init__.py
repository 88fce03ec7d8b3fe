from .user import User, UserCreate, UserUpdate
from .auth import Token, TokenPayload, LoginRequest, RefreshTokenRequest
from .project import Project, ProjectCreate, ProjectUpdate
from .activity import Activity, ActivityCreate, ActivityUpdate
from .tag import Tag, TagCreate
from .timesheet import (
    Timesheet, TimesheetCreate, TimesheetUpdate, TimesheetWithDetails,
    TimesheetStop, TimesheetMetaField, TimesheetSummary
)

__all__ = [
    # User schemas
    "User", "UserCreate", "UserUpdate",
    # Auth schemas
    "Token", "TokenPayload", "LoginRequest", "RefreshTokenRequest",
    # Project schemas
    "Project", "ProjectCreate", "ProjectUpdate",
    # Activity schemas
    "Activity", "ActivityCreate", "ActivityUpdate",
    # Tag schemas
    "Tag", "TagCreate",
    # Timesheet schemas
    "Timesheet", "TimesheetCreate", "TimesheetUpdate", "TimesheetWithDetails",
    "TimesheetStop", "TimesheetMetaField", "TimesheetSummary",
]
