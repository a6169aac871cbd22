"""Reusable FastAPI dependencies."""

from .database import get_db_session
from .orders import get_order_service, verify_request_signature

__all__ = [
    "get_db_session",
    "get_order_service",
    "verify_request_signature",
]
