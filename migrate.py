"""
Database migration script.
Creates tables: users, student_profiles, saved_programs, public_programs
"""

import logging
import time

from database import get_engine, verify_tables_exist

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

def create_tables():
    """Create all tables defined in models that do not exist yet."""
    logger.info("Running migrations...")
    start = time.monotonic()
    engine = get_engine()
    try:
        created = verify_tables_exist(engine)
        elapsed_ms = int((time.monotonic() - start) * 1000)
        logger.info(f"Migrations completed in {elapsed_ms} ms, created: {created or 'nothing'}")
    finally:
        engine.dispose()
        logger.info("Database connection closed after migration.")

if __name__ == "__main__":
    create_tables()
