"""Repository protocol for payment orders."""

from __future__ import annotations

from datetime import datetime
from typing import Protocol, Sequence

from .allocation import Slot
from .models import NewOrder, Order


class OrderRepository(Protocol):
    async def order_id_exists(self, order_id: str) -> bool:
        ...

    async def get_by_trade_id(self, trade_id: str) -> Order | None:
        ...

    async def list_pending_slots(
        self,
        wallets: Sequence[str],
        min_units: int,
        max_units: int,
    ) -> set[Slot]:
        ...

    async def claim_slot(self, order: NewOrder, slot: Slot) -> Order:
        """Insert a pending order holding ``slot`` and commit.

        Raises ``SlotTakenError`` when another pending order holds the slot and
        ``DuplicateOrderError`` when ``order.order_id`` is already used.
        """
        ...

    async def find_pending_by_slot(self, wallet_address: str, settlement_units: int) -> Order | None:
        ...

    async def mark_paid(self, order_pk: str, ledger_tx_id: str, paid_at: datetime) -> Order | None:
        """Move a pending order to paid and commit; ``None`` if it was not pending."""
        ...

    async def mark_callback_confirmed(self, order_pk: str) -> None:
        ...
