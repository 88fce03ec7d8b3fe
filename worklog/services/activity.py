import logging
from typing import List, Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session

from worklog.models.activity import Activity
from worklog.schemas.activity import ActivityCreate, ActivityUpdate

logger = logging.getLogger(__name__)


class ActivityService:
    @staticmethod
    def get_activity(db: Session, activity_id: int) -> Optional[Activity]:
        """Get activity by ID"""
        return db.query(Activity).filter(Activity.id == activity_id).first()

    @staticmethod
    def get_activities(
        db: Session,
        skip: int = 0,
        limit: int = 100,
        project_id: Optional[int] = None,
        visible: Optional[bool] = None,
    ) -> List[Activity]:
        """Get activities, for a project this includes the global ones"""
        query = db.query(Activity)

        if project_id:
            query = query.filter(or_(Activity.project_id == project_id, Activity.project_id.is_(None)))
        if visible is not None:
            query = query.filter(Activity.visible == visible)

        return query.order_by(Activity.name).offset(skip).limit(limit).all()

    @staticmethod
    def create_activity(db: Session, activity: ActivityCreate) -> Activity:
        """Create new activity"""
        db_activity = Activity(**activity.model_dump())
        db.add(db_activity)
        db.commit()
        db.refresh(db_activity)
        logger.info(f"Created activity {db_activity.name} ({db_activity.id})")
        return db_activity

    @staticmethod
    def update_activity(db: Session, activity_id: int, activity_update: ActivityUpdate) -> Optional[Activity]:
        """Update activity"""
        db_activity = db.query(Activity).filter(Activity.id == activity_id).first()
        if not db_activity:
            return None

        update_data = activity_update.model_dump(exclude_unset=True)
        for field, value in update_data.items():
            setattr(db_activity, field, value)

        db.commit()
        db.refresh(db_activity)
        return db_activity

    @staticmethod
    def delete_activity(db: Session, activity_id: int) -> bool:
        """Delete activity and its timesheets"""
        db_activity = db.query(Activity).filter(Activity.id == activity_id).first()
        if not db_activity:
            return False

        db.delete(db_activity)
        db.commit()
        logger.info(f"Deleted activity {activity_id}")
        return True
