"""
Tests for priority scoring and urgency bands
"""

import pytest
from decimal import Decimal

from biztrack.models.stock import StockItem
from biztrack.schemas.reorder import ReorderAnalytics
from biztrack.services.reorder.priority import calculate_priority, get_urgency_level


def item(quantity, price="10.00", reorder_level=15):
    return StockItem(sku="P-1", name="Probe", quantity=quantity, price=Decimal(price), reorder_level=reorder_level)


def analytics(average_daily_sales=0.0, days_until_stockout=999):
    return ReorderAnalytics(
        suggested_quantity=10,
        average_daily_sales=average_daily_sales,
        current_stock=0,
        reorder_level=15,
        days_until_stockout=days_until_stockout,
    )


class TestCalculatePriority:

    def test_out_of_stock_fast_mover_is_critical(self):
        score = calculate_priority(item(0), analytics(6, 0))

        assert score == 100 + 30 + 15
        assert get_urgency_level(score) == "critical"

    def test_stockout_rules_are_exclusive(self):
        # stock <= 0 wins over a short horizon
        assert calculate_priority(item(0, reorder_level=-1), analytics(0, 1)) == 100
        assert calculate_priority(item(5, reorder_level=0), analytics(0, 3)) == 50
        assert calculate_priority(item(5, reorder_level=0), analytics(0, 7)) == 25
        assert calculate_priority(item(5, reorder_level=0), analytics(0, 8)) == 0

    def test_demand_rules(self):
        assert calculate_priority(item(50, reorder_level=0), analytics(5.01)) == 30
        assert calculate_priority(item(50, reorder_level=0), analytics(5)) == 15
        assert calculate_priority(item(50, reorder_level=0), analytics(2)) == 0

    def test_value_rules(self):
        assert calculate_priority(item(10, price="1200.00", reorder_level=0), analytics()) == 20
        assert calculate_priority(item(10, price="600.00", reorder_level=0), analytics()) == 10
        assert calculate_priority(item(10, price="500.00", reorder_level=0), analytics()) == 0

    def test_rules_add_up(self):
        # 50 horizon + 30 demand + 20 value + 15 threshold
        score = calculate_priority(item(10, price="1200.00"), analytics(6, 2))

        assert score == 115

    def test_at_reorder_level_counts(self):
        assert calculate_priority(item(15, reorder_level=15), analytics()) == 15
        assert calculate_priority(item(16, reorder_level=15), analytics()) == 0


class TestUrgencyLevel:

    @pytest.mark.parametrize("score,expected", [
        (165, "critical"),
        (100, "critical"),
        (99, "high"),
        (50, "high"),
        (49, "medium"),
        (25, "medium"),
        (24, "low"),
        (0, "low"),
    ])
    def test_bands(self, score, expected):
        assert get_urgency_level(score) == expected
