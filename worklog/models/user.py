from sqlalchemy import Boolean, Column, Integer, String, DateTime, Enum, Float
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import enum

from worklog.core.database import Base


class UserRole(str, enum.Enum):
    ADMIN = "admin"
    MANAGER = "manager"
    USER = "user"


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(180), unique=True, index=True, nullable=False)
    username = Column(String(180), unique=True, index=True, nullable=False)
    hashed_password = Column(String, nullable=False)
    alias = Column(String(60), nullable=True)
    role = Column(Enum(UserRole), default=UserRole.USER, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    is_superuser = Column(Boolean, default=False, nullable=False)

    # Preferences
    timezone = Column(String(64), nullable=True)
    hourly_rate = Column(Float, nullable=True)  # last rate consulted before the global default

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # Relationships
    timesheets = relationship("Timesheet", back_populates="user", cascade="all, delete")

    @property
    def display_name(self) -> str:
        return self.alias or self.username
