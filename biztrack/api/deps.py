"""
API Dependencies
Common dependencies for API endpoints
"""

from typing import Generator

from biztrack.core.database import SessionLocal
from biztrack.core.security import Actor, get_current_actor  # noqa: F401


def get_db() -> Generator:
    """
    Database dependency - creates a new database session for each request.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
