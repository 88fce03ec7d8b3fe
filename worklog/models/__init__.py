from .user import User, UserRole
from .project import Project
from .activity import Activity
from .tag import Tag
from .timesheet import Timesheet, timesheet_tags
from .timesheet_meta import TimesheetMeta

__all__ = [
    "User",
    "UserRole",
    "Project",
    "Activity",
    "Tag",
    "Timesheet",
    "timesheet_tags",
    "TimesheetMeta",
]
