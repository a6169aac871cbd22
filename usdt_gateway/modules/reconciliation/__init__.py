"""Reconciliation exports"""

from .models import LedgerTransfer, ReconciliationReport
from .service import CallbackClient, LedgerClient, Notifier, ReconciliationService

__all__ = [
    "CallbackClient",
    "LedgerClient",
    "LedgerTransfer",
    "Notifier",
    "ReconciliationReport",
    "ReconciliationService",
]
