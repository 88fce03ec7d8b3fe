from sqlalchemy import Column, Integer, String, Text, DateTime, Boolean, Float
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from worklog.core.database import Base


class Project(Base):
    __tablename__ = "projects"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(150), nullable=False, index=True)
    comment = Column(Text, nullable=True)
    order_number = Column(String(20), nullable=True)
    visible = Column(Boolean, default=True, nullable=False)

    # Rates
    fixed_rate = Column(Float, nullable=True)
    hourly_rate = Column(Float, nullable=True)

    # Audit fields
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # Relationships
    activities = relationship("Activity", back_populates="project", cascade="all, delete")
    timesheets = relationship("Timesheet", back_populates="project", cascade="all, delete")
