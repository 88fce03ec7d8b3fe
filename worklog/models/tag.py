from sqlalchemy import Column, Integer, String, DateTime
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from worklog.core.database import Base


class Tag(Base):
    __tablename__ = "tags"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), unique=True, nullable=False, index=True)
    color = Column(String(7), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())

    timesheets = relationship("Timesheet", secondary="timesheet_tags", back_populates="tags")

    def add_timesheet(self, timesheet) -> "Tag":
        if timesheet in self.timesheets:
            return self
        self.timesheets.append(timesheet)
        timesheet.add_tag(self)
        return self

    def remove_timesheet(self, timesheet) -> None:
        if timesheet not in self.timesheets:
            return
        self.timesheets.remove(timesheet)
        timesheet.remove_tag(self)

    def __repr__(self) -> str:
        return f"<Tag {self.name!r}>"
