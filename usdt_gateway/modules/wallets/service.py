"""Wallet pool service.

Addresses are provisioned by operators (see the ``wallet`` CLI commands); the
allocator and the reconciler only read the enabled set.
"""

from __future__ import annotations

import logging
from typing import Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from .exceptions import WalletAlreadyExistsError, WalletNotFoundError
from .models import Wallet
from .repository import WalletRepository

logger = logging.getLogger(__name__)


class WalletService:
    def __init__(self, repository: WalletRepository) -> None:
        self._repository = repository

    @classmethod
    def with_session(cls, session: AsyncSession) -> "WalletService":
        from usdt_gateway.infrastructure.database.repositories import SqlWalletRepository

        return cls(SqlWalletRepository(session))

    async def list_enabled_addresses(self) -> list[str]:
        return await self._repository.list_enabled_addresses()

    async def list_wallets(self) -> Sequence[Wallet]:
        return await self._repository.list_wallets()

    async def add_wallet(self, address: str) -> Wallet:
        address = address.strip()
        if not address:
            raise ValueError("钱包地址不能为空")
        if await self._repository.get_by_address(address) is not None:
            raise WalletAlreadyExistsError(f"钱包地址已存在: {address}")
        wallet = await self._repository.add_wallet(address)
        logger.info("Wallet %s added to pool", address)
        return wallet

    async def enable(self, address: str) -> Wallet:
        return await self._set_enabled(address, True)

    async def disable(self, address: str) -> Wallet:
        return await self._set_enabled(address, False)

    async def _set_enabled(self, address: str, is_enabled: bool) -> Wallet:
        wallet = await self._repository.set_enabled(address, is_enabled)
        if wallet is None:
            raise WalletNotFoundError(address)
        logger.info("Wallet %s %s", address, "enabled" if is_enabled else "disabled")
        return wallet
