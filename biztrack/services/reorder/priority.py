"""
Priority scoring for low-stock items

Additive rules; each group contributes independently.
"""
from biztrack.models.stock import StockItem
from biztrack.schemas.reorder import ReorderAnalytics, UrgencyLevel


def calculate_priority(item: StockItem, analytics: ReorderAnalytics) -> int:
    score = 0
    stock = item.quantity or 0

    # Stockout horizon
    if stock <= 0:
        score += 100
    elif analytics.days_until_stockout <= 3:
        score += 50
    elif analytics.days_until_stockout <= 7:
        score += 25

    # Demand rate
    if analytics.average_daily_sales > 5:
        score += 30
    elif analytics.average_daily_sales > 2:
        score += 15

    # Value on hand
    stock_value = float(item.stock_value)
    if stock_value > 10000:
        score += 20
    elif stock_value > 5000:
        score += 10

    if stock <= item.reorder_level:
        score += 15

    return score


def get_urgency_level(score: int) -> str:
    if score >= 100:
        return UrgencyLevel.CRITICAL.value
    if score >= 50:
        return UrgencyLevel.HIGH.value
    if score >= 25:
        return UrgencyLevel.MEDIUM.value
    return UrgencyLevel.LOW.value
