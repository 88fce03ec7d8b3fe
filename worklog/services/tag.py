from typing import Iterable, List, Optional

from sqlalchemy.orm import Session

from worklog.models.tag import Tag
from worklog.schemas.tag import TagCreate


class TagService:
    @staticmethod
    def get_tag(db: Session, tag_id: int) -> Optional[Tag]:
        return db.query(Tag).filter(Tag.id == tag_id).first()

    @staticmethod
    def get_tag_by_name(db: Session, name: str) -> Optional[Tag]:
        return db.query(Tag).filter(Tag.name == name).first()

    @staticmethod
    def get_tags(db: Session, skip: int = 0, limit: int = 100, name: Optional[str] = None) -> List[Tag]:
        """Get tags, optionally those whose name contains ``name``"""
        query = db.query(Tag)
        if name:
            query = query.filter(Tag.name.contains(name))
        return query.order_by(Tag.name).offset(skip).limit(limit).all()

    @staticmethod
    def create_tag(db: Session, tag: TagCreate) -> Tag:
        db_tag = Tag(**tag.model_dump())
        db.add(db_tag)
        db.commit()
        db.refresh(db_tag)
        return db_tag

    @staticmethod
    def get_or_create_tags(db: Session, names: Iterable[str]) -> List[Tag]:
        """Resolve tag names, creating missing tags without committing"""
        tags = []
        seen = set()
        for name in names:
            name = name.strip()
            if not name or name in seen:
                continue
            seen.add(name)
            tag = TagService.get_tag_by_name(db, name)
            if tag is None:
                tag = Tag(name=name)
                db.add(tag)
            tags.append(tag)
        return tags
