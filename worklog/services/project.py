import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from worklog.models.project import Project
from worklog.schemas.project import ProjectCreate, ProjectUpdate

logger = logging.getLogger(__name__)


class ProjectService:
    @staticmethod
    def get_project(db: Session, project_id: int) -> Optional[Project]:
        """Get project by ID"""
        return db.query(Project).filter(Project.id == project_id).first()

    @staticmethod
    def get_projects(
        db: Session,
        skip: int = 0,
        limit: int = 100,
        visible: Optional[bool] = None,
    ) -> List[Project]:
        """Get all projects with optional filtering"""
        query = db.query(Project)

        if visible is not None:
            query = query.filter(Project.visible == visible)

        return query.order_by(Project.name).offset(skip).limit(limit).all()

    @staticmethod
    def create_project(db: Session, project: ProjectCreate) -> Project:
        """Create new project"""
        db_project = Project(**project.model_dump())
        db.add(db_project)
        db.commit()
        db.refresh(db_project)
        logger.info(f"Created project {db_project.name} ({db_project.id})")
        return db_project

    @staticmethod
    def update_project(db: Session, project_id: int, project_update: ProjectUpdate) -> Optional[Project]:
        """Update project"""
        db_project = db.query(Project).filter(Project.id == project_id).first()
        if not db_project:
            return None

        update_data = project_update.model_dump(exclude_unset=True)
        for field, value in update_data.items():
            setattr(db_project, field, value)

        db.commit()
        db.refresh(db_project)
        return db_project

    @staticmethod
    def delete_project(db: Session, project_id: int) -> bool:
        """Delete project, its activities and timesheets"""
        db_project = db.query(Project).filter(Project.id == project_id).first()
        if not db_project:
            return False

        db.delete(db_project)
        db.commit()
        logger.info(f"Deleted project {project_id}")
        return True
