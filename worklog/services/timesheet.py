import logging
from datetime import datetime, timedelta
from typing import Iterable, List, Optional, Tuple

from sqlalchemy.orm import Session, joinedload, selectinload

from worklog.core.dates import ensure_aware, get_zone, utcnow
from worklog.models.activity import Activity
from worklog.models.project import Project
from worklog.models.timesheet import Timesheet
from worklog.models.timesheet_meta import TimesheetMeta
from worklog.models.user import User
from worklog.schemas.timesheet import TimesheetCreate, TimesheetMetaField, TimesheetStop, TimesheetUpdate
from worklog.services.rate import RateCalculator
from worklog.services.tag import TagService

logger = logging.getLogger(__name__)

# changes to these fields invalidate the stored duration and rate
_CALCULATION_FIELDS = {"begin", "end", "duration", "project_id", "activity_id", "fixed_rate", "hourly_rate"}
_NOT_NULLABLE_FIELDS = {"begin", "project_id", "activity_id", "exported"}


class TimesheetService:
    @staticmethod
    def get_timesheet(db: Session, timesheet_id: int) -> Optional[Timesheet]:
        """Get timesheet by ID"""
        return db.query(Timesheet).filter(Timesheet.id == timesheet_id).first()

    @staticmethod
    def get_timesheet_with_details(db: Session, timesheet_id: int) -> Optional[Timesheet]:
        """Get timesheet by ID with user, project and activity loaded"""
        return (
            db.query(Timesheet)
            .options(
                joinedload(Timesheet.user),
                joinedload(Timesheet.project),
                joinedload(Timesheet.activity),
                selectinload(Timesheet.tags),
                selectinload(Timesheet.meta_fields),
            )
            .filter(Timesheet.id == timesheet_id)
            .first()
        )

    @staticmethod
    def get_timesheets(
        db: Session,
        skip: int = 0,
        limit: int = 100,
        user_id: Optional[int] = None,
        project_id: Optional[int] = None,
        activity_id: Optional[int] = None,
        begin: Optional[datetime] = None,
        end: Optional[datetime] = None,
        running: Optional[bool] = None,
        exported: Optional[bool] = None,
    ) -> List[Timesheet]:
        """Get timesheets with optional filtering, latest first"""
        query = db.query(Timesheet)

        if user_id:
            query = query.filter(Timesheet.user_id == user_id)
        if project_id:
            query = query.filter(Timesheet.project_id == project_id)
        if activity_id:
            query = query.filter(Timesheet.activity_id == activity_id)
        if begin:
            query = query.filter(Timesheet.begin >= ensure_aware(begin))
        if end:
            query = query.filter(Timesheet.begin <= ensure_aware(end))
        if running is True:
            query = query.filter(Timesheet.end.is_(None))
        elif running is False:
            query = query.filter(Timesheet.end.isnot(None))
        if exported is not None:
            query = query.filter(Timesheet.exported == exported)

        return query.order_by(Timesheet.begin.desc(), Timesheet.id.desc()).offset(skip).limit(limit).all()

    @staticmethod
    def get_active_timesheets(db: Session, user_id: int) -> List[Timesheet]:
        """Get the running timesheets of a user"""
        return (
            db.query(Timesheet)
            .filter(Timesheet.user_id == user_id, Timesheet.end.is_(None))
            .order_by(Timesheet.begin.desc())
            .all()
        )

    @staticmethod
    def resolve_assignment(db: Session, project_id: int, activity_id: int) -> Optional[Tuple[Project, Activity]]:
        """Project and activity, None unless both exist and the activity may be used for the project"""
        project = db.query(Project).filter(Project.id == project_id).first()
        activity = db.query(Activity).filter(Activity.id == activity_id).first()
        if project is None or activity is None or not activity.usable_for(project.id):
            return None
        return project, activity

    @staticmethod
    def calculate(entry: Timesheet, keep_rate: bool = False) -> None:
        """Derive duration and rate of a stopped entry from its times.

        Running entries keep a zero duration and no stored rate.
        """
        if entry.end is None:
            return
        entry.duration = int((entry.end - entry.begin).total_seconds())
        if not keep_rate:
            RateCalculator().calculate(entry)

    @staticmethod
    def stop_active_timesheets(db: Session, user_id: int) -> int:
        """Stop all running timesheets of a user without committing"""
        active = TimesheetService.get_active_timesheets(db, user_id)
        for entry in active:
            entry.end = utcnow().astimezone(get_zone(entry.timezone))
            TimesheetService.calculate(entry)
            logger.info(f"Stopped running timesheet {entry.id} of user {user_id}")
        return len(active)

    @staticmethod
    def _set_tags(db: Session, entry: Timesheet, names: Iterable[str]) -> None:
        tags = TagService.get_or_create_tags(db, names)
        for tag in list(entry.tags):
            if tag not in tags:
                entry.remove_tag(tag)
        for tag in tags:
            entry.add_tag(tag)

    @staticmethod
    def _set_meta_fields(entry: Timesheet, fields: Iterable[TimesheetMetaField]) -> None:
        for field in fields:
            entry.set_meta_field(TimesheetMeta(**field.model_dump()))

    @staticmethod
    def create_timesheet(db: Session, timesheet: TimesheetCreate, user_id: int) -> Optional[Timesheet]:
        """Create new timesheet, None for an unknown user or a project and activity that don't fit together"""
        user = db.query(User).filter(User.id == user_id).first()
        assignment = TimesheetService.resolve_assignment(db, timesheet.project_id, timesheet.activity_id)
        if user is None or assignment is None:
            return None
        project, activity = assignment

        # relationships instead of ids, so rates resolve before the first flush
        db_timesheet = Timesheet(
            **timesheet.model_dump(
                exclude={"user_id", "project_id", "activity_id", "duration", "rate", "tags", "meta_fields"}
            ),
            user=user,
            project=project,
            activity=activity,
        )
        if db_timesheet.end is None and timesheet.duration:
            db_timesheet.end = db_timesheet.begin + timedelta(seconds=timesheet.duration)

        if db_timesheet.end is None:
            TimesheetService.stop_active_timesheets(db, user_id)

        db.add(db_timesheet)
        TimesheetService._set_tags(db, db_timesheet, timesheet.tags)
        TimesheetService._set_meta_fields(db_timesheet, timesheet.meta_fields)

        if timesheet.rate is not None:
            db_timesheet.rate = timesheet.rate
        TimesheetService.calculate(db_timesheet, keep_rate=timesheet.rate is not None)

        db.commit()
        db.refresh(db_timesheet)
        logger.info(f"Created timesheet {db_timesheet.id} for user {user_id}")
        return db_timesheet

    @staticmethod
    def stop_timesheet(
        db: Session, timesheet_id: int, stop_data: Optional[TimesheetStop] = None
    ) -> Optional[Timesheet]:
        """Stop a running timesheet, None if it is unknown, stopped or would end before it began"""
        db_timesheet = TimesheetService.get_timesheet(db, timesheet_id)
        if not db_timesheet or not db_timesheet.is_running:
            return None

        if stop_data and stop_data.end:
            end = ensure_aware(stop_data.end)
        else:
            end = utcnow().astimezone(get_zone(db_timesheet.timezone))
        if end < db_timesheet.begin:
            return None

        db_timesheet.end = end
        if stop_data and stop_data.description:
            db_timesheet.description = stop_data.description
        TimesheetService.calculate(db_timesheet)

        db.commit()
        db.refresh(db_timesheet)
        logger.info(f"Stopped timesheet {db_timesheet.id} after {db_timesheet.duration}s")
        return db_timesheet

    @staticmethod
    def restart_timesheet(db: Session, timesheet_id: int, user_id: int) -> Optional[Timesheet]:
        """Start a new running timesheet with the same project, activity, description and tags"""
        source = TimesheetService.get_timesheet(db, timesheet_id)
        user = db.query(User).filter(User.id == user_id).first()
        if not source or not user:
            return None

        TimesheetService.stop_active_timesheets(db, user_id)

        db_timesheet = Timesheet(
            begin=utcnow().astimezone(get_zone(source.timezone)),
            user=user,
            project=source.project,
            activity=source.activity,
            description=source.description,
            fixed_rate=source.fixed_rate,
            hourly_rate=source.hourly_rate,
        )
        db.add(db_timesheet)
        for tag in source.tags:
            db_timesheet.add_tag(tag)

        db.commit()
        db.refresh(db_timesheet)
        logger.info(f"Restarted timesheet {timesheet_id} as {db_timesheet.id}")
        return db_timesheet

    @staticmethod
    def update_timesheet(db: Session, timesheet_id: int, timesheet_update: TimesheetUpdate) -> Optional[Timesheet]:
        """Update timesheet, None if it is unknown or the result would be invalid"""
        db_timesheet = TimesheetService.get_timesheet(db, timesheet_id)
        if not db_timesheet:
            return None

        update_data = timesheet_update.model_dump(exclude_unset=True)
        for field in _NOT_NULLABLE_FIELDS:
            if field in update_data and update_data[field] is None:
                del update_data[field]
        tags = update_data.pop("tags", None)
        duration = update_data.pop("duration", None)

        if "project_id" in update_data or "activity_id" in update_data:
            assignment = TimesheetService.resolve_assignment(
                db,
                update_data.pop("project_id", db_timesheet.project_id),
                update_data.pop("activity_id", db_timesheet.activity_id),
            )
            if assignment is None:
                return None
            db_timesheet.project, db_timesheet.activity = assignment
            update_data["project_id"] = db_timesheet.project.id

        begin = ensure_aware(update_data.get("begin", db_timesheet.begin))
        end = update_data.get("end", db_timesheet.end)
        if end is not None and ensure_aware(end) < begin:
            return None

        for field, value in update_data.items():
            setattr(db_timesheet, field, value)

        if duration is not None and "end" not in update_data:
            db_timesheet.end = db_timesheet.begin + timedelta(seconds=duration)

        if tags is not None:
            TimesheetService._set_tags(db, db_timesheet, tags)

        rate_given = update_data.get("rate") is not None
        if _CALCULATION_FIELDS.intersection(update_data) or duration is not None:
            TimesheetService.calculate(db_timesheet, keep_rate=rate_given)

        db.commit()
        db.refresh(db_timesheet)
        return db_timesheet

    @staticmethod
    def set_meta_fields(
        db: Session, timesheet_id: int, fields: List[TimesheetMetaField]
    ) -> Optional[Timesheet]:
        """Add or merge meta fields by name"""
        db_timesheet = TimesheetService.get_timesheet(db, timesheet_id)
        if not db_timesheet:
            return None

        TimesheetService._set_meta_fields(db_timesheet, fields)

        db.commit()
        db.refresh(db_timesheet)
        return db_timesheet

    @staticmethod
    def delete_timesheet(db: Session, timesheet_id: int) -> bool:
        """Delete timesheet"""
        db_timesheet = TimesheetService.get_timesheet(db, timesheet_id)
        if not db_timesheet:
            return False

        db.delete(db_timesheet)
        db.commit()
        logger.info(f"Deleted timesheet {timesheet_id}")
        return True

    @staticmethod
    def get_summary(
        db: Session,
        user_id: Optional[int] = None,
        project_id: Optional[int] = None,
        begin: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> dict:
        """Totals over stopped timesheets"""
        query = db.query(Timesheet).filter(Timesheet.end.isnot(None))

        if user_id:
            query = query.filter(Timesheet.user_id == user_id)
        if project_id:
            query = query.filter(Timesheet.project_id == project_id)
        if begin:
            query = query.filter(Timesheet.begin >= ensure_aware(begin))
        if end:
            query = query.filter(Timesheet.begin <= ensure_aware(end))

        entries = query.all()
        total_duration = sum(entry._duration or 0 for entry in entries)

        return {
            "total_entries": len(entries),
            "total_duration": total_duration,
            "total_hours": round(total_duration / 3600, 2),
            "total_rate": round(sum(entry.rate for entry in entries), 2),
            "exported_entries": sum(1 for entry in entries if entry.exported),
        }
