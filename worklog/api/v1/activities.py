from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from worklog.core.database import get_db
from worklog.core.deps import get_current_active_user, require_manager_or_admin
from worklog.models.user import User as UserModel
from worklog.schemas.activity import Activity, ActivityCreate, ActivityUpdate
from worklog.services.activity import ActivityService
from worklog.services.project import ProjectService

router = APIRouter()


@router.get("/", response_model=List[Activity])
async def read_activities(
    skip: int = 0,
    limit: int = 100,
    project_id: Optional[int] = None,
    visible: Optional[bool] = None,
    db: Session = Depends(get_db),
    current_user: UserModel = Depends(get_current_active_user),
):
    """Get activities, filtered by project this includes global activities"""
    return ActivityService.get_activities(db, skip=skip, limit=limit, project_id=project_id, visible=visible)


@router.get("/{activity_id}", response_model=Activity)
async def read_activity(
    activity_id: int,
    db: Session = Depends(get_db),
    current_user: UserModel = Depends(get_current_active_user),
):
    """Get activity by ID"""
    activity = ActivityService.get_activity(db, activity_id=activity_id)
    if activity is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Activity not found"
        )
    return activity


@router.post("/", response_model=Activity)
async def create_activity(
    activity: ActivityCreate,
    db: Session = Depends(get_db),
    current_user: UserModel = Depends(require_manager_or_admin),
):
    """Create new activity (Manager or Admin only)"""
    if activity.project_id is not None and ProjectService.get_project(db, activity.project_id) is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Project not found"
        )
    return ActivityService.create_activity(db=db, activity=activity)


@router.put("/{activity_id}", response_model=Activity)
async def update_activity(
    activity_id: int,
    activity_update: ActivityUpdate,
    db: Session = Depends(get_db),
    current_user: UserModel = Depends(require_manager_or_admin),
):
    """Update activity (Manager or Admin only)"""
    activity = ActivityService.update_activity(db, activity_id=activity_id, activity_update=activity_update)
    if activity is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Activity not found"
        )
    return activity


@router.delete("/{activity_id}")
async def delete_activity(
    activity_id: int,
    db: Session = Depends(get_db),
    current_user: UserModel = Depends(require_manager_or_admin),
):
    """Delete activity and its timesheets (Manager or Admin only)"""
    if not ActivityService.delete_activity(db, activity_id=activity_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Activity not found"
        )
    return {"message": "Activity deleted successfully"}
