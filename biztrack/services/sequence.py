"""
Sequence Service
Allocates human-readable document numbers (RO-000001, PO-000001, SALE-000001)
"""
from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
import logging

from biztrack.core.config import settings
from biztrack.core.exceptions import ConflictError
from biztrack.models.sequence import SequenceCounter

logger = logging.getLogger(__name__)


class SequenceService:
    """
    Counter-backed numbering.

    The increment runs inside the caller's transaction, so the counter row
    stays locked until the document that uses the number is committed and
    a rolled back document gives its number back.
    """

    def __init__(self, db: Session):
        self.db = db

    def next_value(self, name: str) -> int:
        """Increment and return the counter for a series, creating it on first use"""
        for attempt in range(1, settings.SEQUENCE_ALLOCATION_ATTEMPTS + 1):
            result = self.db.execute(
                update(SequenceCounter)
                .where(SequenceCounter.name == name)
                .values(value=SequenceCounter.value + 1)
                .execution_options(synchronize_session=False)
            )
            if result.rowcount:
                return self.db.execute(
                    select(SequenceCounter.value).where(SequenceCounter.name == name)
                ).scalar_one()

            try:
                with self.db.begin_nested():
                    self.db.add(SequenceCounter(name=name, value=1))
                return 1
            except IntegrityError:
                # another transaction created the series first
                logger.info(f"Sequence {name} created concurrently, retry {attempt}")

        raise ConflictError(
            f"Could not allocate a number for series {name}",
            code="SEQUENCE_EXHAUSTED",
        )

    def next_number(self, prefix: str) -> str:
        value = self.next_value(prefix)
        return f"{prefix}-{value:0{settings.SEQUENCE_PAD_WIDTH}d}"

    def next_reorder_number(self) -> str:
        return self.next_number(settings.REORDER_NUMBER_PREFIX)

    def next_purchase_number(self) -> str:
        return self.next_number(settings.PURCHASE_NUMBER_PREFIX)

    def next_sale_number(self) -> str:
        return self.next_number(settings.SALE_NUMBER_PREFIX)
