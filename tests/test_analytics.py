"""
Tests for Replenishment Analytics
Demand rate, stockout horizon and suggested quantity
"""

import pytest
from sqlalchemy.orm import Session

from biztrack.core.exceptions import NotFoundError
from biztrack.services.reorder.analytics import (
    ReplenishmentAnalyticsService, compute_analytics, default_analytics
)


class TestReplenishmentAnalytics:
    """Test suite for ReplenishmentAnalyticsService"""

    def test_no_sales_uses_hint_and_sentinel(self, db_session: Session, make_item):
        item = make_item(quantity=40, reorder_quantity=25)

        result = ReplenishmentAnalyticsService(db_session).calculate_reorder_quantity(item.id)

        assert result.average_daily_sales == 0
        assert result.days_until_stockout == 999
        assert result.suggested_quantity == 25
        assert result.current_stock == 40
        assert result.calculations.total_sold_90_days == 0
        assert result.calculations.review_period == 7

    def test_low_demand_falls_back_to_hint(self, db_session: Session, make_item, record_sales):
        item = make_item(quantity=50, lead_time_days=7, reorder_quantity=10)
        record_sales(item, 90, days_ago=10)
        record_sales(item, 90, days_ago=20)

        result = ReplenishmentAnalyticsService(db_session).calculate_reorder_quantity(item.id)

        # 180 / 90 = 2 a day; 14 days of cover plus 14 safety is 42, below stock
        assert result.average_daily_sales == 2.0
        assert result.days_until_stockout == 25
        assert result.suggested_quantity == 10
        assert result.calculations.safety_stock == 14
        assert result.calculations.annual_demand == 730

    def test_high_demand_suggestion(self, db_session: Session, make_item, record_sales):
        item = make_item(quantity=5, lead_time_days=7, reorder_quantity=10)
        record_sales(item, 540, days_ago=30)

        result = ReplenishmentAnalyticsService(db_session).calculate_reorder_quantity(item.id)

        # (7 + 7) * 6 + 42 - 5
        assert result.average_daily_sales == 6.0
        assert result.suggested_quantity == 121
        assert result.days_until_stockout == 0
        assert result.calculations.total_sold_90_days == 540
        assert result.calculations.annual_demand == 2190
        assert result.calculations.lead_time_days == 7

    def test_sales_outside_window_ignored(self, db_session: Session, make_item, record_sales):
        item = make_item(quantity=20)
        record_sales(item, 500, days_ago=120)
        record_sales(item, 9, days_ago=5)

        result = ReplenishmentAnalyticsService(db_session).calculate_reorder_quantity(item.id)

        assert result.calculations.total_sold_90_days == 9
        assert result.average_daily_sales == 0.1

    def test_total_sold_window(self, db_session: Session, make_item, record_sales):
        item = make_item(quantity=20)
        record_sales(item, 500, days_ago=120)
        record_sales(item, 9, days_ago=5)
        service = ReplenishmentAnalyticsService(db_session)

        assert service.total_sold(item.id) == 9
        assert service.total_sold(item.id, days=None) == 9
        assert service.total_sold(item.id, days=3) == 0
        assert service.total_sold(item.id, days=365) == 509

    def test_other_items_sales_ignored(self, db_session: Session, make_item, record_sales):
        item = make_item(quantity=20)
        other = make_item(quantity=20)
        record_sales(other, 300, days_ago=5)

        result = ReplenishmentAnalyticsService(db_session).calculate_reorder_quantity(item.id)

        assert result.calculations.total_sold_90_days == 0

    def test_reported_average_is_rounded(self, db_session: Session, make_item, record_sales):
        item = make_item(quantity=7, lead_time_days=3)
        record_sales(item, 100, days_ago=3)

        result = ReplenishmentAnalyticsService(db_session).calculate_reorder_quantity(item.id)

        assert result.average_daily_sales == 1.11
        assert result.days_until_stockout == 6
        # safety 3.33 reported rounded up
        assert result.calculations.safety_stock == 4

    def test_missing_item_raises_not_found(self, db_session: Session):
        with pytest.raises(NotFoundError):
            ReplenishmentAnalyticsService(db_session).calculate_reorder_quantity(9999)

    def test_zero_hint_uses_default_quantity(self, make_item):
        item = make_item(quantity=100, reorder_quantity=0)

        result = compute_analytics(item, 0)

        assert result.suggested_quantity == 10

    def test_failure_degrades_to_defaults(self, db_session: Session, make_item, monkeypatch):
        item = make_item(quantity=4, reorder_quantity=30)
        service = ReplenishmentAnalyticsService(db_session)

        def broken(*args, **kwargs):
            raise RuntimeError("sales history unavailable")

        monkeypatch.setattr(service, "total_sold", broken)
        result = service.analytics_or_default(item)

        assert result == default_analytics(item)
        assert result.suggested_quantity == 30
        assert result.days_until_stockout == 999
