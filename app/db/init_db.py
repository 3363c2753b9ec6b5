"""
Create tables directly from the models.

Used for local SQLite runs and tests; deployed databases go through Alembic
(see app.db.migrate).
"""
import logging

from app.db.base import Base
from app.db.session import engine
import app.db.models  # noqa: F401  registers every model on Base.metadata

logger = logging.getLogger(__name__)


def init_db(bind=None):
    bind = bind or engine
    Base.metadata.create_all(bind=bind)
    logger.info("Database tables ensured")
