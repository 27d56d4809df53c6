from sqlalchemy import create_engine, inspect
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker
from typing import Optional
from config import settings
from models import Base
import logging

logger = logging.getLogger(__name__)

_engine: Optional[Engine] = None

SessionLocal = sessionmaker(autocommit=False, autoflush=False)

def get_engine() -> Engine:
    """Create (once) and return the database engine."""
    global _engine
    if _engine is None:
        if not settings.DATABASE_URL:
            raise ValueError("DATABASE_URL environment variable not set")
        _engine = create_engine(settings.DATABASE_URL, pool_pre_ping=True)
    return _engine

def get_db():
    """Dependency to get database session."""
    db = SessionLocal(bind=get_engine())
    try:
        yield db
    finally:
        db.close()

def verify_tables_exist(engine: Optional[Engine] = None) -> list:
    """Ensure required tables exist, create if missing. Returns the created table names."""
    engine = engine or get_engine()
    existing_tables = set(inspect(engine).get_table_names())
    missing = [name for name in Base.metadata.tables if name not in existing_tables]

    if missing:
        logger.info(f"Creating missing tables: {missing}")
        Base.metadata.create_all(bind=engine)
    return missing
