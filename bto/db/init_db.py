"""
Database initialisation, run once at start-up.
Creates missing tables and, on an empty user table, loads the seed files.
"""
from sqlalchemy import inspect
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker

from bto.config import Settings
from bto.db.base import Base
from bto.db.seed import seed_users
from bto.logger import get_logger
from bto.repositories.user_repository import UserRepository
# ------------------- register every table -------------------
from bto.models.user import User  # noqa: F401
from bto.models.project import Project, ProjectFlat, ProjectOfficer  # noqa: F401
from bto.models.document import Document  # noqa: F401

logger = get_logger(__name__)


def init_db(engine: Engine) -> None:
    Base.metadata.create_all(bind=engine)


def check_tables_exist(engine: Engine) -> bool:
    """Whether the schema has been created."""
    tables = inspect(engine).get_table_names()
    return "users" in tables and "documents" in tables


def auto_init(engine: Engine, session_factory: sessionmaker, settings: Settings) -> None:
    '''
    Create the schema if needed, then seed users when none exist yet.
    '''
    logger.info("🔍 checking database state")

    if not check_tables_exist(engine):
        logger.info("📦 tables missing, creating")
        init_db(engine)

    if not settings.seed_data_dir:
        logger.info("no SEED_DATA_DIR configured, skipping seed")
        return

    db = session_factory()
    try:
        if UserRepository(db).count() > 0:
            logger.info("✅ users already present, skipping seed")
            return
        created = seed_users(db, settings.seed_data_dir, settings.default_password)
        logger.info(f"🎉 seeded {created} user(s) from {settings.seed_data_dir}")
    except Exception:
        db.rollback()
        logger.exception("seeding users failed")
        raise
    finally:
        db.close()
