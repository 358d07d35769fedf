"""
Shared column helpers for BizTrack models
"""
from datetime import datetime, timezone

from sqlalchemy import Column, DateTime


def utcnow() -> datetime:
    """Naive UTC timestamp; all stored datetimes are naive UTC"""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class TimestampMixin:
    """created_at / updated_at maintained on the Python side"""

    created_at = Column(DateTime, default=utcnow, nullable=False, index=True, doc="Record creation timestamp")
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False, doc="Last update timestamp")
