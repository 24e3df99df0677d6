"""Database engine, sessions and schema bootstrap"""
import logging
from contextlib import contextmanager

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from aetherchat.config.settings import get_settings

logger = logging.getLogger(__name__)

settings = get_settings()

engine = create_engine(
    settings.DATABASE_URL,
    pool_size=settings.DB_POOL_SIZE,
    max_overflow=settings.DB_MAX_OVERFLOW,
    pool_pre_ping=True,
)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db():
    """Request-scoped session for FastAPI routes"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def task_session() -> Session:
    """Session for background jobs; rolled back if the job raises"""
    db = SessionLocal()
    try:
        yield db
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


def create_tables():
    """Create missing tables straight from the models (local setups; deployments use alembic)"""
    from aetherchat.models import Base

    Base.metadata.create_all(bind=engine)
    logger.info(f"Created tables: {sorted(Base.metadata.tables)}")


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    create_tables()
