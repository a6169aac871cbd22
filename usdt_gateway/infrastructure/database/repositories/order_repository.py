"""SQLAlchemy implementation of the order repository."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Sequence

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from usdt_gateway.db.models import (
    ORDER_STATUS_PAID,
    ORDER_STATUS_PENDING,
    PENDING_SLOT_INDEX,
    Order as OrderModel,
    generate_uuid,
    utcnow,
)
from usdt_gateway.modules.orders.allocation import Slot
from usdt_gateway.modules.orders.exceptions import DuplicateOrderError, SlotTakenError
from usdt_gateway.modules.orders.models import NewOrder, Order, OrderStatus, ensure_utc

logger = logging.getLogger(__name__)


def _is_pending_slot_violation(exc: IntegrityError) -> bool:
    # PostgreSQL reports the index name, SQLite only the indexed columns
    message = str(exc.orig)
    return PENDING_SLOT_INDEX in message or "orders.settlement_units" in message


class SqlOrderRepository:
    """Order repository backed by SQLAlchemy models.

    ``claim_slot`` and ``mark_paid`` commit their own transaction: the row they
    write is the unit of coordination between concurrent allocators and the
    reconciler.
    """

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def order_id_exists(self, order_id: str) -> bool:
        stmt = select(OrderModel.id).where(OrderModel.order_id == order_id)
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none() is not None

    async def get_by_trade_id(self, trade_id: str) -> Order | None:
        stmt = select(OrderModel).where(OrderModel.trade_id == trade_id)
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        return self._to_domain(model) if model else None

    async def list_pending_slots(
        self,
        wallets: Sequence[str],
        min_units: int,
        max_units: int,
    ) -> set[Slot]:
        if not wallets:
            return set()
        stmt = select(OrderModel.wallet_address, OrderModel.settlement_units).where(
            OrderModel.status == ORDER_STATUS_PENDING,
            OrderModel.wallet_address.in_(list(wallets)),
            OrderModel.settlement_units.between(min_units, max_units),
        )
        result = await self._session.execute(stmt)
        return {Slot(wallet, units) for wallet, units in result.all()}

    async def claim_slot(self, order: NewOrder, slot: Slot) -> Order:
        now = utcnow()
        model = OrderModel(
            id=generate_uuid(),
            trade_id=order.trade_id,
            order_id=order.order_id,
            requested_amount_units=order.requested_amount_units,
            requested_currency=order.requested_currency,
            settlement_units=slot.settlement_units,
            wallet_address=slot.wallet_address,
            status=ORDER_STATUS_PENDING,
            notify_url=order.notify_url,
            redirect_url=order.redirect_url,
            callback_confirmed=False,
            created_at=now,
            updated_at=now,
        )
        self._session.add(model)
        try:
            await self._session.commit()
        except IntegrityError as exc:
            await self._session.rollback()
            if await self.order_id_exists(order.order_id):
                raise DuplicateOrderError() from exc
            # 冲突的待支付订单可能已在回滚后被标记为已支付，不能只靠重新查询判断
            if _is_pending_slot_violation(exc) or await self.find_pending_by_slot(
                slot.wallet_address, slot.settlement_units
            ) is not None:
                raise SlotTakenError(f"{slot.wallet_address}/{slot.settlement_units}") from exc
            raise
        return self._to_domain(model)

    async def find_pending_by_slot(self, wallet_address: str, settlement_units: int) -> Order | None:
        stmt = select(OrderModel).where(
            OrderModel.wallet_address == wallet_address,
            OrderModel.settlement_units == settlement_units,
            OrderModel.status == ORDER_STATUS_PENDING,
        )
        result = await self._session.execute(stmt)
        model = result.scalars().first()
        return self._to_domain(model) if model else None

    async def mark_paid(self, order_pk: str, ledger_tx_id: str, paid_at: datetime) -> Order | None:
        stmt = (
            update(OrderModel)
            .where(OrderModel.id == order_pk, OrderModel.status == ORDER_STATUS_PENDING)
            .values(status=ORDER_STATUS_PAID, ledger_tx_id=ledger_tx_id, updated_at=paid_at)
            .execution_options(synchronize_session="fetch")
            .returning(OrderModel)
        )
        result = await self._session.execute(stmt)
        model = result.scalars().first()
        await self._session.commit()
        return self._to_domain(model) if model else None

    async def mark_callback_confirmed(self, order_pk: str) -> None:
        stmt = (
            update(OrderModel)
            .where(OrderModel.id == order_pk)
            .values(callback_confirmed=True)
            .execution_options(synchronize_session=False)
        )
        await self._session.execute(stmt)
        await self._session.commit()

    @staticmethod
    def _to_domain(model: OrderModel) -> Order:
        return Order(
            id=model.id,
            trade_id=model.trade_id,
            order_id=model.order_id,
            requested_amount_units=model.requested_amount_units,
            requested_currency=model.requested_currency,
            settlement_units=model.settlement_units,
            wallet_address=model.wallet_address,
            status=OrderStatus(model.status),
            notify_url=model.notify_url,
            redirect_url=model.redirect_url,
            ledger_tx_id=model.ledger_tx_id,
            callback_confirmed=bool(model.callback_confirmed),
            created_at=ensure_utc(model.created_at),
            updated_at=ensure_utc(model.updated_at),
        )
