"""Repository protocol for the wallet address pool."""

from __future__ import annotations

from typing import Protocol, Sequence

from .models import Wallet


class WalletRepository(Protocol):
    async def list_enabled_addresses(self) -> list[str]:
        """Enabled addresses in stable allocation order."""
        ...

    async def list_wallets(self) -> Sequence[Wallet]:
        ...

    async def get_by_address(self, address: str) -> Wallet | None:
        ...

    async def add_wallet(self, address: str, *, is_enabled: bool = True) -> Wallet:
        ...

    async def set_enabled(self, address: str, is_enabled: bool) -> Wallet | None:
        ...
