"""
Database initialization script.
This script creates all database tables.
Run this as: python init_db.py
"""

import logging
import sys
from pathlib import Path

# Configure logging
logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")
logger = logging.getLogger("db-init")

# Add current directory to path to ensure imports work
sys.path.append(str(Path(__file__).parent))

from sqlalchemy import inspect
from be4real.core.config import settings
from be4real.db.init_db import create_all_tables
from be4real.db.session import engine, database_url

def init_db() -> bool:
    """Initialize the database by creating all tables."""
    logger.info(f"Initializing database at: {database_url.render_as_string(hide_password=True)}")
    logger.info(f"Existing tables: {inspect(engine).get_table_names()}")

    if not create_all_tables():
        return False

    logger.info(f"Tables after creation: {inspect(engine).get_table_names()}")
    return True

if __name__ == "__main__":
    logger.info(f"Starting database initialization ({settings.ENVIRONMENT})")
    if init_db():
        logger.info("Database initialization completed successfully")
    else:
        logger.error("Database initialization failed")
        sys.exit(1)
