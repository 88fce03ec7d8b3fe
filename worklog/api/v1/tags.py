from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from worklog.core.database import get_db
from worklog.core.deps import get_current_active_user
from worklog.models.user import User as UserModel
from worklog.schemas.tag import Tag, TagCreate
from worklog.services.tag import TagService

router = APIRouter()


@router.get("/", response_model=List[Tag])
async def read_tags(
    skip: int = 0,
    limit: int = 100,
    name: Optional[str] = None,
    db: Session = Depends(get_db),
    current_user: UserModel = Depends(get_current_active_user),
):
    """Get tags, optionally searching by name"""
    return TagService.get_tags(db, skip=skip, limit=limit, name=name)


@router.post("/", response_model=Tag)
async def create_tag(
    tag: TagCreate,
    db: Session = Depends(get_db),
    current_user: UserModel = Depends(get_current_active_user),
):
    """Create new tag"""
    if TagService.get_tag_by_name(db, tag.name):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Tag already exists"
        )
    return TagService.create_tag(db, tag)
