"""BizTrack API v1 endpoints"""

from . import reorders, notifications, notification_archive, stock, sales, purchases

__all__ = ["reorders", "notifications", "notification_archive", "stock", "sales", "purchases"]
