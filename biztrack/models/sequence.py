"""
BizTrack Sequence Counters
One row per document series (RO, PO, SALE)
"""
from sqlalchemy import Column, String, Integer

from biztrack.core.database import Base


class SequenceCounter(Base):
    """Last value handed out for a document series"""
    __tablename__ = "sequence_counters"

    name = Column(String(20), primary_key=True)
    value = Column(Integer, nullable=False, default=0)

    def __repr__(self):
        return f"<SequenceCounter {self.name}={self.value}>"
