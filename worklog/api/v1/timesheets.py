import logging
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from worklog.core.database import get_db
from worklog.core.deps import get_current_active_user, is_privileged
from worklog.models.timesheet import Timesheet as TimesheetModel
from worklog.models.user import User as UserModel
from worklog.schemas.timesheet import (
    Timesheet, TimesheetCreate, TimesheetUpdate, TimesheetWithDetails,
    TimesheetStop, TimesheetMetaField, TimesheetSummary
)
from worklog.services.timesheet import TimesheetService
from worklog.services.user import UserService

logger = logging.getLogger(__name__)

router = APIRouter()


def _get_accessible_timesheet(
    db: Session, timesheet_id: int, current_user: UserModel, modify: bool = False
) -> TimesheetModel:
    timesheet = TimesheetService.get_timesheet(db, timesheet_id)
    if timesheet is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Timesheet not found"
        )

    if is_privileged(current_user):
        return timesheet

    if timesheet.user_id != current_user.id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Not enough permissions"
        )

    if modify and timesheet.exported:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Exported timesheets can only be changed by managers"
        )

    return timesheet


@router.get("/", response_model=List[Timesheet])
async def read_timesheets(
    skip: int = 0,
    limit: int = 100,
    user_id: Optional[int] = None,
    project_id: Optional[int] = None,
    activity_id: Optional[int] = None,
    begin: Optional[datetime] = None,
    end: Optional[datetime] = None,
    running: Optional[bool] = None,
    exported: Optional[bool] = None,
    db: Session = Depends(get_db),
    current_user: UserModel = Depends(get_current_active_user),
):
    """Get timesheets with optional filtering"""
    # Regular users only see their own timesheets
    if not is_privileged(current_user):
        user_id = current_user.id

    return TimesheetService.get_timesheets(
        db,
        skip=skip,
        limit=limit,
        user_id=user_id,
        project_id=project_id,
        activity_id=activity_id,
        begin=begin,
        end=end,
        running=running,
        exported=exported,
    )


@router.get("/active", response_model=List[Timesheet])
async def read_active_timesheets(
    db: Session = Depends(get_db),
    current_user: UserModel = Depends(get_current_active_user),
):
    """Get the running timesheets of the current user"""
    return TimesheetService.get_active_timesheets(db, current_user.id)


@router.get("/summary", response_model=TimesheetSummary)
async def read_timesheet_summary(
    user_id: Optional[int] = None,
    project_id: Optional[int] = None,
    begin: Optional[datetime] = None,
    end: Optional[datetime] = None,
    db: Session = Depends(get_db),
    current_user: UserModel = Depends(get_current_active_user),
):
    """Get duration and rate totals of stopped timesheets"""
    if not is_privileged(current_user):
        user_id = current_user.id

    return TimesheetService.get_summary(
        db,
        user_id=user_id,
        project_id=project_id,
        begin=begin,
        end=end,
    )


@router.get("/{timesheet_id}", response_model=TimesheetWithDetails)
async def read_timesheet(
    timesheet_id: int,
    db: Session = Depends(get_db),
    current_user: UserModel = Depends(get_current_active_user),
):
    """Get timesheet by ID with details"""
    _get_accessible_timesheet(db, timesheet_id, current_user)
    return TimesheetService.get_timesheet_with_details(db, timesheet_id)


@router.post("/", response_model=Timesheet)
async def create_timesheet(
    timesheet: TimesheetCreate,
    db: Session = Depends(get_db),
    current_user: UserModel = Depends(get_current_active_user),
):
    """Create new timesheet, without end it starts running"""
    if timesheet.exported and not is_privileged(current_user):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Not enough permissions to change the export state"
        )

    user_id = current_user.id
    if timesheet.user_id is not None and timesheet.user_id != current_user.id:
        if not is_privileged(current_user):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Not enough permissions to record time for other users"
            )
        if UserService.get_user(db, timesheet.user_id) is None:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="User not found"
            )
        user_id = timesheet.user_id

    created = TimesheetService.create_timesheet(db, timesheet=timesheet, user_id=user_id)
    if created is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid project or activity"
        )

    return created


@router.patch("/{timesheet_id}", response_model=Timesheet)
async def update_timesheet(
    timesheet_id: int,
    timesheet_update: TimesheetUpdate,
    db: Session = Depends(get_db),
    current_user: UserModel = Depends(get_current_active_user),
):
    """Update timesheet, an explicit null end reopens it"""
    _get_accessible_timesheet(db, timesheet_id, current_user, modify=True)

    if timesheet_update.exported is not None and not is_privileged(current_user):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Not enough permissions to change the export state"
        )

    updated = TimesheetService.update_timesheet(db, timesheet_id, timesheet_update)
    if updated is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid timesheet data"
        )

    return updated


@router.post("/{timesheet_id}/stop", response_model=Timesheet)
async def stop_timesheet(
    timesheet_id: int,
    stop_data: Optional[TimesheetStop] = None,
    db: Session = Depends(get_db),
    current_user: UserModel = Depends(get_current_active_user),
):
    """Stop a running timesheet"""
    _get_accessible_timesheet(db, timesheet_id, current_user, modify=True)

    stopped = TimesheetService.stop_timesheet(db, timesheet_id, stop_data)
    if stopped is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Timesheet is not running or end is before begin"
        )

    return stopped


@router.post("/{timesheet_id}/restart", response_model=Timesheet)
async def restart_timesheet(
    timesheet_id: int,
    db: Session = Depends(get_db),
    current_user: UserModel = Depends(get_current_active_user),
):
    """Start a new timesheet copying project, activity, description and tags"""
    _get_accessible_timesheet(db, timesheet_id, current_user)
    return TimesheetService.restart_timesheet(db, timesheet_id, user_id=current_user.id)


@router.patch("/{timesheet_id}/meta", response_model=Timesheet)
async def update_timesheet_meta(
    timesheet_id: int,
    fields: List[TimesheetMetaField],
    db: Session = Depends(get_db),
    current_user: UserModel = Depends(get_current_active_user),
):
    """Add meta fields or merge them into existing ones with the same name"""
    _get_accessible_timesheet(db, timesheet_id, current_user, modify=True)
    return TimesheetService.set_meta_fields(db, timesheet_id, fields)


@router.delete("/{timesheet_id}")
async def delete_timesheet(
    timesheet_id: int,
    db: Session = Depends(get_db),
    current_user: UserModel = Depends(get_current_active_user),
):
    """Delete timesheet"""
    _get_accessible_timesheet(db, timesheet_id, current_user, modify=True)

    if not TimesheetService.delete_timesheet(db, timesheet_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Timesheet not found"
        )

    logger.info(f"User {current_user.id} deleted timesheet {timesheet_id}")
    return {"message": "Timesheet deleted successfully"}
