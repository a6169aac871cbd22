"""SQLAlchemy-backed repository implementations."""

from .order_repository import SqlOrderRepository
from .wallet_repository import SqlWalletRepository

__all__ = [
    "SqlOrderRepository",
    "SqlWalletRepository",
]
