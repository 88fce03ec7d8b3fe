import logging
from typing import Generator

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from worklog.core.config import settings

logger = logging.getLogger(__name__)

connect_args = {}
if settings.DATABASE_URL.startswith("sqlite"):
    connect_args = {"check_same_thread": False}

# Log database driver for observability
db_driver = settings.DATABASE_URL.split(":", 1)[0] if ":" in settings.DATABASE_URL else "unknown"
logger.info(f"DB_URL_DRIVER={db_driver}")

engine = create_engine(settings.DATABASE_URL, connect_args=connect_args, echo=False)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def create_db_and_tables() -> None:
    """Create tables that don't exist yet. Safe to call repeatedly."""
    # models must be imported so their tables are registered on Base.metadata
    import worklog.models  # noqa: F401

    Base.metadata.create_all(bind=engine)


def get_db() -> Generator[Session, None, None]:
    """Yield a database session and close it afterwards"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
