"""USDT (TRC20) payment gateway with shared-wallet amount slots."""

__version__ = "0.1.0"
