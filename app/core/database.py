# File: database.py
# Path: app/core/database.py

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base

from app.core.config import settings

# Shared declarative base for all models
Base = declarative_base()


def _engine_options(url: str) -> dict:
    """Pool and driver options per backend; SQLite rejects the pool sizing arguments."""
    if url.startswith("sqlite"):
        return {"connect_args": {"check_same_thread": False}}
    return {
        "pool_pre_ping": True,
        "pool_size": 5,
        "max_overflow": 10,
        "pool_recycle": 300,
        "pool_timeout": 20,
        "connect_args": {
            "options": "-c timezone=utc",
            "connect_timeout": 5,
            "application_name": "VisitorKioskBackend",
        } if "postgresql" in url else {},
    }


engine = create_engine(
    settings.DATABASE_URL,
    echo=settings.database_echo,
    **_engine_options(settings.DATABASE_URL),
)

SessionLocal = sessionmaker(
    bind=engine,
    autocommit=False,
    autoflush=False,
    expire_on_commit=False,
)


def get_db():
    """
    Dependency function for FastAPI endpoints.
    Creates a new database session for each request.
    """
    db = SessionLocal()
    try:
        yield db
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


def get_thread_db():
    """
    Create a standalone database session for background tasks,
    which run after the request-scoped session has been closed.
    """
    return SessionLocal()
