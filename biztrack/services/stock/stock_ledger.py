"""
Stock Ledger Service
Authoritative quantity on hand, reorder thresholds and supplier linkage
"""
from typing import List, Optional
from sqlalchemy import update, or_, func
from sqlalchemy.orm import Session
import logging

from biztrack.core.exceptions import NotFoundError, ValidationError, ConflictError
from biztrack.models.mixins import utcnow
from biztrack.models.stock import StockItem
from biztrack.models.supplier import Supplier
from biztrack.models.reorder import Reorder
from biztrack.models.purchase import PurchaseOrder, PurchaseOrderLine
from biztrack.models.sales import SaleLine
from biztrack.schemas.stock import StockItemCreate, ItemReorderStatus

logger = logging.getLogger(__name__)

OPEN_REORDER_STATUSES = ("pending", "approved", "ordered")


class StockLedgerService:
    """
    Stock ledger
    Every quantity change goes through increment/decrement_with_floor
    """

    def __init__(self, db: Session):
        self.db = db

    # Lookups

    def get_item(self, item_id: int) -> StockItem:
        item = self.db.get(StockItem, item_id)
        if not item:
            raise NotFoundError(f"Stock item {item_id} not found", code="ITEM_NOT_FOUND")
        return item

    def get_supplier(self, supplier_id: int) -> Supplier:
        supplier = self.db.get(Supplier, supplier_id)
        if not supplier:
            raise NotFoundError(f"Supplier {supplier_id} not found", code="SUPPLIER_NOT_FOUND")
        return supplier

    def list_items(
        self,
        skip: int = 0,
        limit: int = 100,
        search: Optional[str] = None,
        category: Optional[str] = None,
        low_stock_only: bool = False,
    ) -> List[StockItem]:
        query = self.db.query(StockItem).filter(StockItem.is_active.is_(True))

        if search:
            pattern = f"%{search.lower()}%"
            query = query.filter(
                or_(func.lower(StockItem.name).like(pattern), func.lower(StockItem.sku).like(pattern))
            )
        if category:
            query = query.filter(StockItem.category == category)
        if low_stock_only:
            query = query.filter(self.low_stock_condition())

        return query.order_by(StockItem.name).offset(skip).limit(limit).all()

    @staticmethod
    def low_stock_condition():
        """SQL form of StockItem.is_low_stock"""
        return or_(StockItem.quantity <= 0, StockItem.quantity <= StockItem.reorder_level)

    # Maintenance

    def create_item(self, data: StockItemCreate) -> StockItem:
        if self.db.query(StockItem).filter(StockItem.sku == data.sku).first():
            raise ValidationError(f"SKU {data.sku} already exists", code="DUPLICATE_SKU")

        values = data.model_dump()
        if data.preferred_supplier_id is not None:
            supplier = self.get_supplier(data.preferred_supplier_id)
            if not values.get("supplier"):
                values["supplier"] = supplier.name

        item = StockItem(**values)
        self.db.add(item)
        self.db.commit()
        self.db.refresh(item)
        logger.info(f"Stock item {item.sku} created with quantity {item.quantity}")
        return item

    def delete_item(self, item_id: int) -> bool:
        """
        Delete an item that no open order refers to.

        Items with sales or purchase history are deactivated instead of
        removed so the history keeps its references.
        """
        item = self.get_item(item_id)

        open_reorders = self.db.query(Reorder).filter(
            Reorder.stock_item_id == item_id,
            Reorder.status.in_(OPEN_REORDER_STATUSES),
        ).count()
        pending_purchases = self.db.query(PurchaseOrderLine).join(PurchaseOrder).filter(
            PurchaseOrderLine.stock_item_id == item_id,
            PurchaseOrder.status == "pending",
        ).count()
        if open_reorders or pending_purchases:
            raise ConflictError(
                f"Stock item {item.sku} is referenced by open orders",
                code="ITEM_IN_USE",
                details={"open_reorders": open_reorders, "pending_purchases": pending_purchases},
            )

        has_history = (
            self.db.query(SaleLine).filter(SaleLine.stock_item_id == item_id).first() is not None
            or self.db.query(PurchaseOrderLine).filter(PurchaseOrderLine.stock_item_id == item_id).first() is not None
            or self.db.query(Reorder).filter(Reorder.stock_item_id == item_id).first() is not None
        )
        if has_history:
            item.is_active = False
            logger.info(f"Stock item {item.sku} deactivated")
        else:
            self.db.delete(item)
            logger.info(f"Stock item {item.sku} deleted")

        self.db.commit()
        return True

    # Quantity primitives

    def decrement_with_floor(self, item_id: int, quantity: int) -> bool:
        """
        Atomically take quantity off an item.

        Returns False, changing nothing, when the item holds less than the
        requested quantity.
        """
        result = self.db.execute(
            update(StockItem)
            .where(StockItem.id == item_id, StockItem.quantity >= quantity)
            .values(quantity=StockItem.quantity - quantity)
            .execution_options(synchronize_session=False)
        )
        self._expire_quantity(item_id)
        return result.rowcount == 1

    def increment(self, item_id: int, quantity: int) -> None:
        result = self.db.execute(
            update(StockItem)
            .where(StockItem.id == item_id)
            .values(quantity=StockItem.quantity + quantity)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            raise NotFoundError(f"Stock item {item_id} not found", code="ITEM_NOT_FOUND")
        self._expire_quantity(item_id)

    def _expire_quantity(self, item_id: int):
        item = self.db.get(StockItem, item_id)
        if item is not None:
            self.db.expire(item, ["quantity", "updated_at"])

    # Reorder state

    def mark_reorder_needed(self, item: StockItem):
        item.reorder_status = ItemReorderStatus.NEEDED.value

    def mark_ordered(self, item: StockItem, purchase_order_id: int):
        item.reorder_status = ItemReorderStatus.ORDERED.value
        item.pending_order_id = purchase_order_id

    def clear_reorder_state(self, item: StockItem, stamp: bool = False):
        item.reorder_status = ItemReorderStatus.NONE.value
        item.pending_order_id = None
        if stamp:
            item.last_reorder_date = utcnow()
