"""Wallet domain specific exceptions."""


class WalletError(Exception):
    """Base class for wallet pool errors."""


class WalletAlreadyExistsError(WalletError):
    """Raised when the address is already part of the pool."""


class WalletNotFoundError(WalletError):
    """Raised when the address is not part of the pool."""
