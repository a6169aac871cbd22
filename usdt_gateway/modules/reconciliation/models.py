"""Ledger transfer records and reconciliation outcomes."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

TRANSFER_STATUS_SUCCESS = "SUCCESS"


@dataclass(frozen=True, slots=True)
class LedgerTransfer:
    to_address: str
    amount_raw: int
    status: str
    block_timestamp: datetime
    tx_hash: str

    @property
    def is_success(self) -> bool:
        return self.status.upper() == TRANSFER_STATUS_SUCCESS


@dataclass(slots=True)
class ReconciliationReport:
    wallets_scanned: int = 0
    failed_wallets: list[str] = field(default_factory=list)
    paid_trade_ids: list[str] = field(default_factory=list)

    @property
    def paid_count(self) -> int:
        return len(self.paid_trade_ids)
