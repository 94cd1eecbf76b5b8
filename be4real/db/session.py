from sqlalchemy import create_engine
from sqlalchemy.engine import make_url
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool
import logging

from be4real.core.config import settings

logger = logging.getLogger("be4real")

# Check if DATABASE_URL is properly set
if not settings.DATABASE_URL:
    logger.error("DATABASE_URL is not set or empty!")
    raise ValueError("DATABASE_URL environment variable is required")

database_url = make_url(settings.DATABASE_URL)
logger.info(f"Connecting to database: {database_url.render_as_string(hide_password=True)}")

def _engine_options() -> dict:
    if database_url.get_backend_name() != "sqlite":
        return {
            "pool_pre_ping": True,  # Check connection before using from pool
            "pool_recycle": 3600,   # Recycle connections after 1 hour
        }

    options = {"connect_args": {"check_same_thread": False}}
    # In-memory SQLite lives on a single connection shared by every session
    if database_url.database in (None, "", ":memory:"):
        options["poolclass"] = StaticPool
    return options

try:
    # Process-wide store handle, disposed by the application shutdown hook
    engine = create_engine(settings.DATABASE_URL, **_engine_options())
    logger.info("Database engine created successfully")
except Exception as e:
    logger.error(f"Failed to create database engine: {e}")
    raise

# Create session factory for database interactions
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Base class for all SQLAlchemy models
Base = declarative_base()

# Database session dependency for FastAPI
def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()

def dispose_engine() -> None:
    engine.dispose()
    logger.info("Database engine disposed")
