"""
Database engine and session management.

Sessions are handed to route handlers through the ``get_db`` dependency so
tests can swap in their own session with ``app.dependency_overrides``.
"""

import logging
import os
from typing import Generator

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker

logger = logging.getLogger(__name__)

DATABASE_URL = os.environ.get("DATABASE_URL", "sqlite:///./task_manager.db")

# SQLite connections are bound to the creating thread unless told otherwise
connect_args = {"check_same_thread": False} if DATABASE_URL.startswith("sqlite") else {}

engine = create_engine(DATABASE_URL, connect_args=connect_args, pool_pre_ping=True)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db() -> Generator[Session, None, None]:
    """Yield a session for the duration of one request."""
    db = SessionLocal()
    try:
        yield db
    except Exception:
        logger.debug("Rolling back session after request failure")
        db.rollback()
        raise
    finally:
        db.close()
