from typing import Any

from sqlalchemy import Column, Integer, String, Text, Boolean, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship

from worklog.core.database import Base


class TimesheetMeta(Base):
    """Named extension value attached to a timesheet.

    ``label``, ``type`` and ``required`` describe how the field is rendered and
    validated. They are not persisted and are re-applied by whoever defines
    the field, see :meth:`merge`.
    """

    __tablename__ = "timesheet_meta"
    __table_args__ = (
        UniqueConstraint("timesheet_id", "name", name="unique_timesheet_meta"),
    )

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(50), nullable=False)
    value = Column(Text, nullable=True)
    visible = Column(Boolean, default=False, nullable=False)

    timesheet_id = Column(Integer, ForeignKey("timesheets.id", ondelete="CASCADE"), nullable=False)
    timesheet = relationship("Timesheet", back_populates="meta_fields")

    # Field definition, not mapped
    label = None
    type = None
    required = False

    def __init__(self, **kwargs: Any):
        kwargs.setdefault("visible", False)
        super().__init__(**kwargs)

    def set_entity(self, timesheet) -> "TimesheetMeta":
        self.timesheet = timesheet
        return self

    def merge(self, meta: "TimesheetMeta") -> "TimesheetMeta":
        """Take over value and definition of another field with the same name."""
        if meta.value is not None:
            self.value = meta.value
        self.visible = meta.visible
        self.label = meta.label
        self.type = meta.type
        self.required = meta.required
        return self

    def __repr__(self) -> str:
        return f"<TimesheetMeta {self.name}={self.value!r}>"
