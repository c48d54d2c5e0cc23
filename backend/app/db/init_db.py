"""
Database initialization script.
"""
import logging

from app.core.config import settings
from app.db.session import init_db

logger = logging.getLogger(__name__)

if __name__ == "__main__":
    logging.basicConfig(level=settings.LOG_LEVEL)
    logger.info(f"Initializing {settings.DATABASE_URL.split(':', 1)[0]} database")
    init_db()
    logger.info("Database initialized successfully")
