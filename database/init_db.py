import logging

from tenacity import retry, stop_after_attempt, wait_fixed

from database.database import Database

logger = logging.getLogger(__name__)


@retry(stop=stop_after_attempt(5), wait=wait_fixed(2), reraise=True)
def init_db(database: Database) -> None:
    """Create all tables, retrying while the database container starts up."""
    logger.info("Initializing database...")
    try:
        database.create_all()
        logger.info("Tables created or verified.")
    except Exception as e:
        logger.error(f"Error initializing DB: {e}")
        raise
