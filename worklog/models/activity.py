from sqlalchemy import Column, Integer, String, Text, DateTime, Boolean, ForeignKey, Float
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from worklog.core.database import Base


class Activity(Base):
    __tablename__ = "activities"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(150), nullable=False, index=True)
    comment = Column(Text, nullable=True)
    visible = Column(Boolean, default=True, nullable=False)

    # Rates
    fixed_rate = Column(Float, nullable=True)
    hourly_rate = Column(Float, nullable=True)

    # Relationships, activities without a project are global
    project_id = Column(Integer, ForeignKey("projects.id", ondelete="CASCADE"), nullable=True)
    project = relationship("Project", back_populates="activities")

    # Audit fields
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    timesheets = relationship("Timesheet", back_populates="activity", cascade="all, delete")

    @property
    def is_global(self) -> bool:
        return self.project_id is None

    def usable_for(self, project_id: int) -> bool:
        """Global activities fit every project, others only their own"""
        return self.project_id is None or self.project_id == project_id
