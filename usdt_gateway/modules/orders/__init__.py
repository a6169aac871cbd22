"""Order domain exports"""

from .exceptions import (
    AmountTooSmallError,
    DuplicateOrderError,
    NoAvailableAmountError,
    NoWalletAvailableError,
    OrderError,
    OrderNotFoundError,
    OrderNotPendingError,
    RateUnavailableError,
)
from .models import (
    AllocationRequest,
    AllocationResult,
    CheckoutDetails,
    Order,
    OrderStatus,
    OrderStatusView,
)
from .service import OrderService, RateSource

__all__ = [
    "AllocationRequest",
    "AllocationResult",
    "AmountTooSmallError",
    "CheckoutDetails",
    "DuplicateOrderError",
    "NoAvailableAmountError",
    "NoWalletAvailableError",
    "Order",
    "OrderError",
    "OrderNotFoundError",
    "OrderNotPendingError",
    "OrderService",
    "OrderStatus",
    "OrderStatusView",
    "RateSource",
    "RateUnavailableError",
]
