from datetime import datetime
from typing import Any, List, Optional

from sqlalchemy import (
    Boolean, CheckConstraint, Column, DateTime, Float, ForeignKey, Integer, String, Table, Text, event,
)
from sqlalchemy.orm import relationship, synonym
from sqlalchemy.sql import func

from worklog.core.database import Base
from worklog.core.dates import UTCDateTime, ensure_aware, get_zone, utcnow, zone_name
from worklog.services.rate import RateCalculator


timesheet_tags = Table(
    "timesheet_tags",
    Base.metadata,
    Column("timesheet_id", Integer, ForeignKey("timesheets.id", ondelete="CASCADE"), primary_key=True),
    Column("tag_id", Integer, ForeignKey("tags.id", ondelete="CASCADE"), primary_key=True),
)


class Timesheet(Base):
    """One recorded, or still running, work interval of a user.

    An entry without ``end`` is running. Its stored duration is 0 and its
    stored rate is unset; reading ``duration`` and ``rate`` then yields live
    values computed from the current time.
    """

    __tablename__ = "timesheets"
    __table_args__ = (
        CheckConstraint("duration >= 0", name="ck_timesheets_duration_positive"),
        CheckConstraint("rate IS NULL OR rate >= 0", name="ck_timesheets_rate_positive"),
    )

    id = Column(Integer, primary_key=True, index=True)
    _begin = Column("start_time", UTCDateTime, nullable=False, index=True)
    _end = Column("end_time", UTCDateTime, nullable=True)
    timezone = Column(String(64), nullable=False)
    _duration = Column("duration", Integer, default=0, nullable=True)
    description = Column(Text, nullable=True)
    _rate = Column("rate", Float, nullable=True)  # None until stored, see rate
    fixed_rate = Column(Float, nullable=True)
    hourly_rate = Column(Float, nullable=True)
    exported = Column(Boolean, default=False, nullable=False)

    # Relationships
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    user = relationship("User", back_populates="timesheets")

    activity_id = Column(Integer, ForeignKey("activities.id", ondelete="CASCADE"), nullable=False, index=True)
    activity = relationship("Activity", back_populates="timesheets")

    project_id = Column(Integer, ForeignKey("projects.id", ondelete="CASCADE"), nullable=False, index=True)
    project = relationship("Project", back_populates="timesheets")

    tags = relationship("Tag", secondary=timesheet_tags, back_populates="timesheets", order_by="Tag.name")
    meta_fields = relationship(
        "TimesheetMeta",
        back_populates="timesheet",
        cascade="all, delete-orphan",
        order_by="TimesheetMeta.id",
    )

    # Audit fields
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # Set once begin and end were moved into the entry's timezone
    _localized = False

    def __init__(self, **kwargs: Any):
        self._duration = 0
        self._rate = None
        self.exported = False
        super().__init__(**kwargs)

    def _localize_dates(self) -> None:
        # read first, so an expired instance reloads (resetting the flag) before the check
        begin, end = self._begin, self._end
        if self._localized:
            return

        zone = get_zone(self.timezone)
        if begin is not None:
            self._begin = begin.astimezone(zone)
        if end is not None:
            self._end = end.astimezone(zone)

        self._localized = True

    def _get_begin(self) -> Optional[datetime]:
        self._localize_dates()
        return self._begin

    def _set_begin(self, value: Optional[datetime]) -> None:
        if value is None:
            self._begin = None
            return
        value = ensure_aware(value)
        self._begin = value
        self.timezone = zone_name(value)

    begin = synonym("_begin", descriptor=property(_get_begin, _set_begin))

    def _get_end(self) -> Optional[datetime]:
        self._localize_dates()
        return self._end

    def _set_end(self, value: Optional[datetime]) -> None:
        if value is None:
            self._end = None
            self._duration = 0
            self._rate = None
            return
        value = ensure_aware(value)
        self._end = value
        self.timezone = zone_name(value)

    end = synonym("_end", descriptor=property(_get_end, _set_end))

    def _get_duration(self) -> int:
        """Stored duration, or the seconds elapsed since begin for a running
        entry without one.

        Do not rely on this for running entries beyond displaying them: the
        value changes on every call and is never persisted.
        """
        if not self._duration and self._begin is not None and self._end is None:
            return int(utcnow().timestamp() - self._begin.timestamp())
        return self._duration or 0

    def _set_duration(self, value: Optional[int]) -> None:
        self._duration = value

    duration = synonym("_duration", descriptor=property(_get_duration, _set_duration))

    def _get_rate(self) -> float:
        if self._rate is None:
            return RateCalculator().get_rate(self)
        return self._rate

    def _set_rate(self, value: Optional[float]) -> None:
        self._rate = value

    rate = synonym("_rate", descriptor=property(_get_rate, _set_rate))

    @property
    def stored_rate(self) -> Optional[float]:
        """Rate as persisted, None when it was never calculated or set."""
        return self._rate

    @property
    def is_running(self) -> bool:
        return self._end is None

    def add_tag(self, tag) -> "Timesheet":
        if tag in self.tags:
            return self
        self.tags.append(tag)
        tag.add_timesheet(self)
        return self

    def remove_tag(self, tag) -> None:
        if tag not in self.tags:
            return
        self.tags.remove(tag)
        tag.remove_timesheet(self)

    def tags_as_list(self) -> List[str]:
        return [tag.name for tag in self.tags]

    def get_visible_meta_fields(self) -> list:
        return [meta for meta in self.meta_fields if meta.visible]

    def get_meta_field(self, name: str):
        for field in self.meta_fields:
            if field.name == name:
                return field
        return None

    def set_meta_field(self, meta) -> "Timesheet":
        current = self.get_meta_field(meta.name)
        if current is None:
            # append through the collection so the field follows us into the session
            if meta not in self.meta_fields:
                self.meta_fields.append(meta)
            meta.set_entity(self)
            return self

        current.merge(meta)
        return self

    def __repr__(self) -> str:
        return f"<Timesheet id={self.id} begin={self._begin} end={self._end}>"


@event.listens_for(Timesheet, "refresh")
def _reset_localization(target: Timesheet, context, attrs) -> None:
    """Reloaded timestamps come back in UTC and need localizing again"""
    target._localized = False
