"""
Custom Application Exceptions
"""
from typing import Any, Dict, List, Optional


class BizTrackException(Exception):
    """Base exception for BizTrack application"""

    status_code = 500

    def __init__(self, message: str = None, code: str = None, details: Any = None):
        self.message = message or "An error occurred in BizTrack"
        self.code = code
        self.details = details
        super().__init__(self.message)

    def __str__(self):
        if self.code:
            return f"[{self.code}] {self.message}"
        return self.message

    def to_dict(self) -> Dict[str, Any]:
        """Convert the exception to a response body"""
        body = {
            "error": self.__class__.__name__,
            "message": self.message,
        }
        if self.code:
            body["code"] = self.code
        if self.details is not None:
            body["details"] = self.details
        return body


class NotFoundError(BizTrackException):
    """Raised when an item, supplier, reorder, purchase or notification is missing"""
    status_code = 404


class ValidationError(BizTrackException):
    """Raised when data validation fails"""
    status_code = 400


class ConflictError(BizTrackException):
    """Raised when a state transition is not allowed"""
    status_code = 409


class InsufficientStockError(BizTrackException):
    """Raised when a stock decrement would drive an item negative"""
    status_code = 400

    def __init__(self, lines: List[Dict[str, Any]], message: Optional[str] = None):
        self.lines = list(lines)
        super().__init__(message or "Insufficient stock", code="INSUFFICIENT_STOCK", details=self.lines)
