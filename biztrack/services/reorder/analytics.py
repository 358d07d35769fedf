"""
Replenishment Analytics Service
Demand rate, stockout horizon and suggested order quantity from recent sales
"""
from datetime import timedelta
from typing import Optional
import math
from sqlalchemy import func
from sqlalchemy.orm import Session
import logging

from biztrack.core.config import settings
from biztrack.models.mixins import utcnow
from biztrack.models.sales import Sale, SaleLine
from biztrack.models.stock import StockItem
from biztrack.schemas.reorder import ReorderAnalytics, AnalyticsCalculations
from biztrack.services.stock.stock_ledger import StockLedgerService

logger = logging.getLogger(__name__)


def default_analytics(item: StockItem) -> ReorderAnalytics:
    """Conservative result used when the calculation cannot be made"""
    return ReorderAnalytics(
        suggested_quantity=item.reorder_quantity or settings.DEFAULT_REORDER_QUANTITY,
        average_daily_sales=0,
        current_stock=item.quantity,
        reorder_level=item.reorder_level,
        days_until_stockout=settings.STOCKOUT_SENTINEL_DAYS,
        calculations=AnalyticsCalculations(),
    )


def compute_analytics(item: StockItem, total_sold: int) -> ReorderAnalytics:
    """
    Replenishment figures for an item given units sold over the window.

    Unrounded demand drives the horizon and the suggestion; the reported
    average is rounded to two places.
    """
    window = settings.ANALYTICS_WINDOW_DAYS
    review_period = settings.REVIEW_PERIOD_DAYS
    lead_time = item.lead_time_days or 0
    stock = item.quantity or 0

    average_daily_sales = total_sold / window
    safety_stock = lead_time * average_daily_sales

    if average_daily_sales > 0:
        days_until_stockout = math.floor(stock / average_daily_sales)
    else:
        days_until_stockout = settings.STOCKOUT_SENTINEL_DAYS

    needed = math.ceil((lead_time + review_period) * average_daily_sales + safety_stock - stock)
    suggested_quantity = max(needed, item.reorder_quantity or settings.DEFAULT_REORDER_QUANTITY, 1)

    return ReorderAnalytics(
        suggested_quantity=suggested_quantity,
        average_daily_sales=round(average_daily_sales, 2),
        current_stock=stock,
        reorder_level=item.reorder_level,
        days_until_stockout=days_until_stockout,
        calculations=AnalyticsCalculations(
            total_sold_90_days=total_sold,
            annual_demand=round(average_daily_sales * 365),
            safety_stock=math.ceil(safety_stock),
            lead_time_days=lead_time,
            review_period=review_period,
        ),
    )


class ReplenishmentAnalyticsService:
    """Reads sale history for the analytics window"""

    def __init__(self, db: Session):
        self.db = db

    def total_sold(self, item_id: int, days: Optional[int] = None) -> int:
        since = utcnow() - timedelta(days=days or settings.ANALYTICS_WINDOW_DAYS)
        total = self.db.query(func.coalesce(func.sum(SaleLine.quantity), 0)).join(Sale).filter(
            SaleLine.stock_item_id == item_id,
            Sale.created_at >= since,
        ).scalar()
        return int(total or 0)

    def calculate_reorder_quantity(self, item_id: int) -> ReorderAnalytics:
        """Raises NotFoundError when the item does not exist"""
        item = StockLedgerService(self.db).get_item(item_id)
        return compute_analytics(item, self.total_sold(item.id))

    def analytics_or_default(self, item: StockItem) -> ReorderAnalytics:
        """For list views: one bad row must not break the listing"""
        try:
            return compute_analytics(item, self.total_sold(item.id))
        except Exception as e:
            logger.error(f"Analytics failed for item {item.id}, using defaults: {e}", exc_info=True)
            return default_analytics(item)
