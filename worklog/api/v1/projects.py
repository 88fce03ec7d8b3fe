from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from worklog.core.database import get_db
from worklog.core.deps import get_current_active_user, require_manager_or_admin
from worklog.models.user import User as UserModel
from worklog.schemas.project import Project, ProjectCreate, ProjectUpdate
from worklog.services.project import ProjectService

router = APIRouter()


@router.get("/", response_model=List[Project])
async def read_projects(
    skip: int = 0,
    limit: int = 100,
    visible: Optional[bool] = None,
    db: Session = Depends(get_db),
    current_user: UserModel = Depends(get_current_active_user),
):
    """Get all projects"""
    return ProjectService.get_projects(db, skip=skip, limit=limit, visible=visible)


@router.get("/{project_id}", response_model=Project)
async def read_project(
    project_id: int,
    db: Session = Depends(get_db),
    current_user: UserModel = Depends(get_current_active_user),
):
    """Get project by ID"""
    project = ProjectService.get_project(db, project_id=project_id)
    if project is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Project not found"
        )
    return project


@router.post("/", response_model=Project)
async def create_project(
    project: ProjectCreate,
    db: Session = Depends(get_db),
    current_user: UserModel = Depends(require_manager_or_admin),
):
    """Create new project (Manager or Admin only)"""
    return ProjectService.create_project(db=db, project=project)


@router.put("/{project_id}", response_model=Project)
async def update_project(
    project_id: int,
    project_update: ProjectUpdate,
    db: Session = Depends(get_db),
    current_user: UserModel = Depends(require_manager_or_admin),
):
    """Update project (Manager or Admin only)"""
    project = ProjectService.update_project(db, project_id=project_id, project_update=project_update)
    if project is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Project not found"
        )
    return project


@router.delete("/{project_id}")
async def delete_project(
    project_id: int,
    db: Session = Depends(get_db),
    current_user: UserModel = Depends(require_manager_or_admin),
):
    """Delete project with its activities and timesheets (Manager or Admin only)"""
    if not ProjectService.delete_project(db, project_id=project_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Project not found"
        )
    return {"message": "Project deleted successfully"}
