"""
Database initialization script.
Creates all tables and optionally seeds the staff directory.
"""

from sqlalchemy import inspect
from app.core.database import engine, Base, SessionLocal
from app.models.staff import StaffUser, StaffRole
from app import models  # noqa: F401
import logging

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

DEFAULT_STAFF = [
    {"name": "Admin User", "email": "admin@visitor-kiosk.local", "role": StaffRole.ADMIN, "department": "IT"},
    {"name": "Reception User", "email": "reception@visitor-kiosk.local", "role": StaffRole.RECEPTION, "department": "Front Desk"},
    {"name": "John Host", "email": "john@visitor-kiosk.local", "role": StaffRole.STAFF, "department": "Sales"},
]


def init_db():
    """
    Initialize the database by creating all tables.
    """
    logger.info("Creating database tables...")
    Base.metadata.create_all(bind=engine)
    logger.info("Database tables created successfully!")


def seed_initial_data():
    """
    Seed the staff directory with one entry per role when it is empty.
    """
    db = SessionLocal()

    try:
        existing = db.query(StaffUser).count()

        if existing == 0:
            logger.info("No staff found. Creating default directory entries...")
            for entry in DEFAULT_STAFF:
                db.add(StaffUser(**entry))
                logger.info(f"  - {entry['name']} ({entry['role'].value})")
            db.commit()
        else:
            logger.info(f"Database already has {existing} staff member(s). Skipping seed data.")

    except Exception as e:
        logger.error(f"Error seeding initial data: {e}")
        db.rollback()
        raise
    finally:
        db.close()


def check_tables():
    """
    Check which tables exist in the database.
    """
    inspector = inspect(engine)
    tables = inspector.get_table_names()

    logger.info("Existing tables in database:")
    for table in tables:
        logger.info(f"  - {table}")

    return tables


if __name__ == "__main__":
    logger.info("=" * 50)
    logger.info("Database Initialization Script")
    logger.info("=" * 50)

    check_tables()
    init_db()
    seed_initial_data()
    check_tables()

    logger.info("=" * 50)
    logger.info("Database initialization complete!")
    logger.info("=" * 50)
