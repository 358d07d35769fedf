"""
Tests for the Reorder Lifecycle Service
Creation, transitions, purchase generation and reporting
"""

import pytest
from decimal import Decimal
from sqlalchemy.orm import Session

from biztrack.core.exceptions import ConflictError, NotFoundError, ValidationError
from biztrack.models.notification import Notification, NotificationArchive
from biztrack.models.purchase import PurchaseOrder
from biztrack.models.stock import StockItem
from biztrack.schemas.purchase import PurchaseStatus
from biztrack.schemas.reorder import (
    ReorderCreate, QuickReorderCreate, PurchaseFromReorderRequest, MarkReceivedRequest,
    ReorderFilters, ReorderStatus, LowStockFilters, UrgencyLevel,
)
from biztrack.services.purchasing.purchase_orders import PurchaseOrderService
from biztrack.services.reorder.lifecycle import ReorderLifecycleService


@pytest.fixture
def service(db_session: Session, actor) -> ReorderLifecycleService:
    return ReorderLifecycleService(db_session, actor)


class TestCreateReorder:

    def test_manual_reorder(self, db_session: Session, service, stock_item, supplier_a):
        reorder = service.create_reorder(ReorderCreate(stock_item_id=stock_item.id, notes="running low"))

        assert reorder.reorder_number == "RO-000001"
        assert reorder.status == "pending"
        assert reorder.trigger_type == "manual"
        assert reorder.supplier_id == supplier_a.id
        assert reorder.stock_at_trigger == 3
        assert reorder.reorder_level == 5
        assert reorder.suggested_quantity == 10
        assert reorder.triggered_by_name == "Test User"
        assert db_session.get(StockItem, stock_item.id).reorder_status == "needed"

        alert = db_session.query(Notification).filter(Notification.type == "reorder_created").one()
        assert alert.message == "Manual reorder request created for Widget (SKU: WID-001)"
        assert alert.related_model == "Reorder"
        assert db_session.get(NotificationArchive, alert.id) is not None

    def test_numbers_increase(self, service, stock_item):
        first = service.create_reorder(ReorderCreate(stock_item_id=stock_item.id))
        second = service.create_reorder(ReorderCreate(stock_item_id=stock_item.id))

        assert (first.reorder_number, second.reorder_number) == ("RO-000001", "RO-000002")

    def test_explicit_quantity_and_supplier(self, service, stock_item, supplier_b):
        reorder = service.create_reorder(ReorderCreate(
            stock_item_id=stock_item.id, supplier_id=supplier_b.id, suggested_quantity=40,
        ))

        assert reorder.suggested_quantity == 40
        assert reorder.supplier_id == supplier_b.id

    def test_missing_item_or_supplier(self, service, stock_item):
        with pytest.raises(NotFoundError):
            service.create_reorder(ReorderCreate(stock_item_id=999))
        with pytest.raises(NotFoundError):
            service.create_reorder(ReorderCreate(stock_item_id=stock_item.id, supplier_id=999))

    def test_notification_failure_does_not_fail_reorder(self, db_session: Session, service, stock_item, monkeypatch):
        def broken(*args, **kwargs):
            raise RuntimeError("notification store down")

        monkeypatch.setattr("biztrack.services.notifications.synchronizer.NotificationSynchronizer.notify", broken)
        reorder = service.create_reorder(ReorderCreate(stock_item_id=stock_item.id))

        assert reorder.id is not None
        assert db_session.query(Notification).count() == 0


class TestTransitions:

    def test_approve(self, db_session: Session, service, stock_item):
        reorder = service.create_reorder(ReorderCreate(stock_item_id=stock_item.id))

        approved = service.approve_reorder(reorder.id)

        assert approved.status == "approved"
        assert approved.resolved_by_id == "user-1"
        assert approved.resolved_at is not None
        assert db_session.query(Notification).filter(Notification.type == "reorder_approved").count() == 1

    def test_approve_only_from_pending(self, service, stock_item):
        reorder = service.create_reorder(ReorderCreate(stock_item_id=stock_item.id))
        service.approve_reorder(reorder.id)

        with pytest.raises(ConflictError):
            service.approve_reorder(reorder.id)

    def test_purchase_from_reorder(self, db_session: Session, service, stock_item, supplier_a):
        reorder = service.create_reorder(ReorderCreate(stock_item_id=stock_item.id))
        service.approve_reorder(reorder.id)

        ordered = service.create_purchase_from_reorder(reorder.id, PurchaseFromReorderRequest(quantity=25))

        po = db_session.get(PurchaseOrder, ordered.purchase_order_id)
        assert ordered.status == "ordered"
        assert ordered.ordered_quantity == 25
        assert po.status == "pending"
        assert po.purchase_number == "PO-000001"
        assert po.supplier_name == supplier_a.name
        assert po.notes == "Created from reorder request RO-000001"
        assert po.lines[0].quantity == 25
        assert po.lines[0].cost == Decimal("12.50")
        assert po.total == Decimal("312.50")

        item = db_session.get(StockItem, stock_item.id)
        assert item.reorder_status == "ordered"
        assert item.pending_order_id == po.id

    def test_purchase_uses_suggested_quantity_and_last_price(self, db_session: Session, service, make_item, supplier_a):
        item = make_item(quantity=1, preferred_supplier_id=supplier_a.id, last_purchase_price=Decimal("9.00"))
        reorder = service.create_reorder(ReorderCreate(stock_item_id=item.id, suggested_quantity=12))

        ordered = service.create_purchase_from_reorder(reorder.id)

        po = db_session.get(PurchaseOrder, ordered.purchase_order_id)
        assert po.lines[0].quantity == 12
        assert po.lines[0].cost == Decimal("9.00")

    def test_purchase_requires_supplier(self, service, make_item):
        item = make_item(quantity=1)
        reorder = service.create_reorder(ReorderCreate(stock_item_id=item.id))

        with pytest.raises(ValidationError):
            service.create_purchase_from_reorder(reorder.id)

    def test_cancel_resets_item(self, db_session: Session, service, stock_item):
        reorder = service.create_reorder(ReorderCreate(stock_item_id=stock_item.id))
        service.create_purchase_from_reorder(reorder.id)

        cancelled = service.cancel_reorder(reorder.id, notes="supplier out of stock")

        assert cancelled.status == "cancelled"
        assert cancelled.notes == "supplier out of stock"
        item = db_session.get(StockItem, stock_item.id)
        assert item.reorder_status == "none"
        assert item.pending_order_id is None

    def test_cancel_twice_is_a_no_op(self, service, stock_item):
        reorder = service.create_reorder(ReorderCreate(stock_item_id=stock_item.id))
        first = service.cancel_reorder(reorder.id, notes="duplicate")
        resolved_at = first.resolved_at

        again = service.cancel_reorder(reorder.id, notes="second attempt")

        assert again.status == "cancelled"
        assert again.notes == "duplicate"
        assert again.resolved_at == resolved_at

    def test_cancel_received_rejected(self, service, stock_item):
        reorder = service.create_reorder(ReorderCreate(stock_item_id=stock_item.id))
        service.create_purchase_from_reorder(reorder.id)
        service.mark_reorder_received(reorder.id)

        with pytest.raises(ConflictError):
            service.cancel_reorder(reorder.id)

    def test_mark_received_defaults_to_ordered(self, db_session: Session, service, stock_item):
        reorder = service.create_reorder(ReorderCreate(stock_item_id=stock_item.id))
        service.create_purchase_from_reorder(reorder.id, PurchaseFromReorderRequest(quantity=30))

        received = service.mark_reorder_received(reorder.id)

        assert received.status == "received"
        assert received.received_quantity == 30
        item = db_session.get(StockItem, stock_item.id)
        assert item.reorder_status == "none"
        assert item.pending_order_id is None
        assert item.last_reorder_date is not None

    def test_mark_received_partial(self, service, stock_item):
        reorder = service.create_reorder(ReorderCreate(stock_item_id=stock_item.id))
        service.create_purchase_from_reorder(reorder.id, PurchaseFromReorderRequest(quantity=30))

        received = service.mark_reorder_received(reorder.id, MarkReceivedRequest(received_quantity=18))

        assert received.received_quantity == 18

    def test_unknown_reorder(self, service):
        with pytest.raises(NotFoundError):
            service.approve_reorder(12345)


class TestPurchaseReceipt:

    def test_receipt_resolves_linked_reorder_once(self, db_session: Session, service, stock_item, actor):
        reorder = service.create_reorder(ReorderCreate(stock_item_id=stock_item.id))
        ordered = service.create_purchase_from_reorder(reorder.id, PurchaseFromReorderRequest(quantity=20))

        PurchaseOrderService(db_session, actor).update_status(ordered.purchase_order_id, PurchaseStatus.RECEIVED)

        resolved = service.get_reorder(reorder.id)
        item = db_session.get(StockItem, stock_item.id)
        assert resolved.status == "received"
        assert resolved.received_quantity == 20
        assert item.quantity == 23
        assert item.reorder_status == "none"
        assert item.pending_order_id is None

    def test_receiving_twice_is_a_no_op(self, db_session: Session, service, stock_item, actor):
        reorder = service.create_reorder(ReorderCreate(stock_item_id=stock_item.id))
        ordered = service.create_purchase_from_reorder(reorder.id, PurchaseFromReorderRequest(quantity=20))
        purchases = PurchaseOrderService(db_session, actor)

        purchases.update_status(ordered.purchase_order_id, PurchaseStatus.RECEIVED)
        purchases.update_status(ordered.purchase_order_id, PurchaseStatus.RECEIVED)

        assert db_session.get(StockItem, stock_item.id).quantity == 23

    def test_unlinked_purchase_leaves_reorders(self, db_session: Session, service, stock_item, actor):
        reorder = service.create_reorder(ReorderCreate(stock_item_id=stock_item.id))
        other = service.create_reorder(ReorderCreate(stock_item_id=stock_item.id))
        ordered = service.create_purchase_from_reorder(other.id)

        PurchaseOrderService(db_session, actor).update_status(ordered.purchase_order_id, PurchaseStatus.RECEIVED)

        assert service.get_reorder(reorder.id).status == "pending"


class TestQuickReorder:

    def test_requires_positive_quantity(self, service, stock_item):
        with pytest.raises(ValidationError):
            service.create_quick_reorder(QuickReorderCreate(stock_item_id=stock_item.id, quantity=0))

    def test_quick_reorder_without_supplier(self, db_session: Session, service, make_item):
        item = make_item(quantity=8, reorder_level=10, cost=Decimal("4.00"))

        result = service.create_quick_reorder(QuickReorderCreate(stock_item_id=item.id, quantity=5))

        po = db_session.get(PurchaseOrder, result["purchase_order_id"])
        assert po.supplier_name == "Unknown Supplier"
        assert po.status == "received"
        assert po.total == Decimal("20.00")
        assert result["reorder"].trigger_type == "manual"
        assert result["previous_stock"] == 8
        assert result["new_stock"] == 13

        alert = db_session.query(Notification).filter(Notification.type == "low_stock_purchase").one()
        assert alert.details["urgency"] == "high"
        assert alert.details["isLowStockPurchase"] is True
        assert alert.related_model == "Purchase"


class TestReporting:

    def test_low_stock_report_sorted_by_priority(self, service, make_item, record_sales):
        calm = make_item(name="Calm", quantity=10, reorder_level=15)
        empty = make_item(name="Empty", quantity=0, reorder_level=15)
        busy = make_item(name="Busy", quantity=5, reorder_level=15)
        make_item(name="Plenty", quantity=100, reorder_level=15)
        record_sales(busy, 270, days_ago=10)

        report = service.get_low_stock_report()

        names = [entry.item.name for entry in report["data"]]
        assert names == ["Empty", "Busy", "Calm"]
        assert report["data"][0].urgency_level == UrgencyLevel.CRITICAL
        assert report["data"][0].priority == 115
        # 5 units at 3 a day: 50 + 15 + 15
        assert report["data"][1].priority == 80
        assert report["data"][2].urgency_level == UrgencyLevel.LOW
        assert report["pagination"].total == 3
        assert calm.id in [entry.item.id for entry in report["data"]]

    def test_low_stock_filters_and_pagination(self, service, make_item):
        make_item(name="A", quantity=0, category="Tools", supplier="Acme Wholesale")
        make_item(name="B", quantity=1, category="Tools", supplier="Globex")
        make_item(name="C", quantity=2, category="Paint", supplier="ACME wholesale")

        by_supplier = service.get_low_stock_report(LowStockFilters(supplier="acme"))
        by_category = service.get_low_stock_report(LowStockFilters(category="Tools"), page=2, limit=1)
        by_urgency = service.get_low_stock_report(LowStockFilters(urgency=UrgencyLevel.CRITICAL))

        assert sorted(e.item.name for e in by_supplier["data"]) == ["A", "C"]
        assert by_category["pagination"].model_dump() == {"page": 2, "limit": 1, "total": 2, "pages": 2}
        assert len(by_category["data"]) == 1
        assert [e.item.name for e in by_urgency["data"]] == ["A"]

    def test_stats(self, service, stock_item, make_item):
        make_item(quantity=0)
        make_item(quantity=100)
        first = service.create_reorder(ReorderCreate(stock_item_id=stock_item.id, suggested_quantity=4))
        second = service.create_reorder(ReorderCreate(stock_item_id=stock_item.id, suggested_quantity=2))
        cancelled = service.create_reorder(ReorderCreate(stock_item_id=stock_item.id, suggested_quantity=50))
        service.create_purchase_from_reorder(second.id)
        service.cancel_reorder(cancelled.id)

        stats = service.get_reorder_stats()

        assert stats["low_stock_items"] == 2
        assert stats["out_of_stock_items"] == 1
        assert stats["pending_reorders"] == 1
        assert stats["ordered_reorders"] == 1
        # (4 + 2) * 12.50
        assert Decimal(str(stats["estimated_reorder_value"])) == Decimal("75")
        assert first.status == "pending"

    def test_stats_skip_deactivated_items(self, db_session: Session, service, make_item):
        make_item(quantity=0)
        retired = make_item(quantity=2)
        retired.is_active = False
        db_session.commit()

        stats = service.get_reorder_stats()

        assert stats["low_stock_items"] == 1
        assert stats["out_of_stock_items"] == 1

    def test_list_reorders_filters(self, service, stock_item, make_item, supplier_b):
        other = make_item(quantity=1)
        first = service.create_reorder(ReorderCreate(stock_item_id=stock_item.id))
        service.create_reorder(ReorderCreate(stock_item_id=other.id, supplier_id=supplier_b.id))
        third = service.create_reorder(ReorderCreate(stock_item_id=stock_item.id))
        service.approve_reorder(third.id)

        everything = service.list_reorders()
        approved = service.list_reorders(ReorderFilters(status=ReorderStatus.APPROVED))
        for_item = service.list_reorders(ReorderFilters(stock_item_id=stock_item.id))
        for_supplier = service.list_reorders(ReorderFilters(supplier_id=supplier_b.id))
        paged = service.list_reorders(page=2, limit=2)

        assert [r.id for r in everything["data"]][0] == first.id
        assert [r.id for r in approved["data"]] == [third.id]
        assert for_item["pagination"].total == 2
        assert for_supplier["pagination"].total == 1
        assert len(paged["data"]) == 1
        assert paged["pagination"].pages == 2
