"""SQLAlchemy implementation for the wallet address pool"""

from __future__ import annotations

from typing import Sequence

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from usdt_gateway.db.models import WalletAddress
from usdt_gateway.modules.wallets.models import Wallet


class SqlWalletRepository:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def list_enabled_addresses(self) -> list[str]:
        stmt = (
            select(WalletAddress.address)
            .where(WalletAddress.is_enabled.is_(True))
            .order_by(WalletAddress.id)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def list_wallets(self) -> Sequence[Wallet]:
        stmt = select(WalletAddress).order_by(WalletAddress.id)
        result = await self.session.execute(stmt)
        return [self._to_domain(model) for model in result.scalars().all()]

    async def get_by_address(self, address: str) -> Wallet | None:
        stmt = select(WalletAddress).where(WalletAddress.address == address)
        result = await self.session.execute(stmt)
        model = result.scalars().first()
        return self._to_domain(model) if model else None

    async def add_wallet(self, address: str, *, is_enabled: bool = True) -> Wallet:
        model = WalletAddress(address=address, is_enabled=is_enabled)
        self.session.add(model)
        await self.session.flush()
        await self.session.refresh(model)
        return self._to_domain(model)

    async def set_enabled(self, address: str, is_enabled: bool) -> Wallet | None:
        stmt = (
            update(WalletAddress)
            .where(WalletAddress.address == address)
            .values(is_enabled=is_enabled)
            .execution_options(synchronize_session="fetch")
            .returning(WalletAddress)
        )
        result = await self.session.execute(stmt)
        model = result.scalars().first()
        return self._to_domain(model) if model else None

    @staticmethod
    def _to_domain(model: WalletAddress) -> Wallet:
        return Wallet(
            id=model.id,
            address=model.address,
            is_enabled=model.is_enabled,
            created_at=model.created_at,
            updated_at=model.updated_at,
        )
