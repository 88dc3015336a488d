"""
Application exceptions, rendered as {"error": message} by the handlers in main.py
"""

from typing import Optional


class AppException(Exception):
    """Base class for errors that map onto an HTTP response"""

    def __init__(self, message: str, code: str = "APP_ERROR", status_code: int = 500) -> None:
        self.message = message
        self.code = code
        self.status_code = status_code
        super().__init__(message)


class ValidationError(AppException):
    """Bad or missing input (400)"""

    def __init__(self, message: str) -> None:
        super().__init__(message=message, code="VALIDATION_ERROR", status_code=400)


class NotFoundError(AppException):
    """Unknown resource id (404)"""

    def __init__(self, resource: str, resource_id: Optional[str] = None) -> None:
        self.resource = resource
        self.resource_id = resource_id
        super().__init__(message=f"{resource} not found", code="NOT_FOUND", status_code=404)


class StoreError(AppException):
    """Unexpected persistence failure (500); the cause is logged, never returned"""

    def __init__(self, message: str = "Internal server error") -> None:
        super().__init__(message=message, code="STORE_ERROR", status_code=500)
