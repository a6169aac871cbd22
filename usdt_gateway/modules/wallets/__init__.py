"""Wallet pool exports"""

from .exceptions import WalletAlreadyExistsError, WalletError, WalletNotFoundError
from .models import Wallet
from .service import WalletService

__all__ = [
    "Wallet",
    "WalletError",
    "WalletAlreadyExistsError",
    "WalletNotFoundError",
    "WalletService",
]
