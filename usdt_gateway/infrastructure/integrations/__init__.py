"""Clients for third-party HTTP APIs (rates, ledger, notifications, callbacks)."""
