"""Match ledger transfers to pending orders and settle them."""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime, timedelta, timezone
from typing import Any, Protocol

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from usdt_gateway.core.config import Settings
from usdt_gateway.infrastructure.database.repositories.order_repository import SqlOrderRepository
from usdt_gateway.infrastructure.database.repositories.wallet_repository import SqlWalletRepository
from usdt_gateway.modules.orders.amounts import format_units, ledger_raw_to_units
from usdt_gateway.modules.orders.models import Order
from usdt_gateway.modules.orders.repository import OrderRepository

from .models import LedgerTransfer, ReconciliationReport
from .notifications import build_callback_payload, build_paid_message, is_acknowledged

logger = logging.getLogger(__name__)


class LedgerClient(Protocol):
    async def list_transfers(self, wallet: str, start: datetime, end: datetime) -> list[LedgerTransfer]:
        ...


class Notifier(Protocol):
    async def notify(self, message: str) -> None:
        ...


class CallbackClient(Protocol):
    async def post_callback(self, url: str, payload: dict[str, Any]) -> str:
        ...


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ReconciliationService:
    """One reconciliation pass per call to :meth:`reconcile_all`.

    Scheduling is external (cron, CLI ``reconcile`` command). Every wallet is
    processed in its own session so a failure stays local to that wallet, and
    the trailing ledger window means a failed pass is retried by the next one.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        ledger: LedgerClient,
        notifier: Notifier,
        callbacks: CallbackClient,
        settings: Settings,
        *,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._session_factory = session_factory
        self._ledger = ledger
        self._notifier = notifier
        self._callbacks = callbacks
        self._clock = clock
        self._window = timedelta(hours=settings.ledger.window_hours)
        self._token_decimals = settings.ledger.token_decimals
        self._expiration_minutes = settings.gateway.order_expiration_minutes
        self._accept_late_payments = settings.gateway.accept_late_payments
        self._secret = settings.gateway.api_auth_token

    async def reconcile_all(self) -> ReconciliationReport:
        report = ReconciliationReport()
        async with self._session_factory() as session:
            wallets = await SqlWalletRepository(session).list_enabled_addresses()

        for wallet in wallets:
            report.wallets_scanned += 1
            try:
                paid = await self.reconcile_wallet(wallet)
            except Exception:
                logger.exception("Check wallet %s failed", wallet)
                report.failed_wallets.append(wallet)
                continue
            report.paid_trade_ids.extend(order.trade_id for order in paid)

        logger.info(
            "Reconciliation pass finished: wallets=%d failed=%d paid=%d",
            report.wallets_scanned,
            len(report.failed_wallets),
            report.paid_count,
        )
        return report

    async def reconcile_wallet(self, wallet: str) -> list[Order]:
        """Settle pending orders of one wallet from its recent transfers.

        Errors while handling a single transfer are logged and the next
        transfer is processed. Ledger query errors (``LedgerQueryError``)
        propagate: :meth:`reconcile_all` is the per-wallet boundary that logs
        them and reports the wallet in ``failed_wallets``.
        """
        now = self._clock()
        transfers = await self._ledger.list_transfers(wallet, now - self._window, now)
        paid: list[Order] = []
        if not transfers:
            return paid

        async with self._session_factory() as session:
            repository = SqlOrderRepository(session)
            for transfer in sorted(transfers, key=lambda item: item.block_timestamp):
                try:
                    order = await self._apply_transfer(repository, wallet, transfer, now)
                except Exception:
                    logger.exception("Processing transfer %s for wallet %s failed", transfer.tx_hash, wallet)
                    await session.rollback()
                    continue
                if order is None:
                    continue
                paid.append(order)
                await self._dispatch(repository, order)
        return paid

    async def _apply_transfer(
        self,
        repository: OrderRepository,
        wallet: str,
        transfer: LedgerTransfer,
        now: datetime,
    ) -> Order | None:
        if transfer.to_address != wallet or not transfer.is_success:
            return None

        units = ledger_raw_to_units(transfer.amount_raw, self._token_decimals)
        if units is None:
            logger.debug("Transfer %s amount %s is finer than a slot step", transfer.tx_hash, transfer.amount_raw)
            return None

        order = await repository.find_pending_by_slot(wallet, units)
        if order is None:
            return None

        if transfer.block_timestamp < order.created_at:
            logger.debug("Transfer %s predates order %s, ignored", transfer.tx_hash, order.trade_id)
            return None

        if not self._accept_late_payments and order.is_expired(self._expiration_minutes, now):
            logger.warning(
                "Transfer %s of %s USDT matches expired order %s, not settled",
                transfer.tx_hash,
                format_units(units),
                order.trade_id,
            )
            return None

        settled = await repository.mark_paid(order.id, transfer.tx_hash, now)
        if settled is None:
            # 已被其他进程处理
            return None
        logger.info(
            "Order %s paid: %s USDT to %s, tx %s",
            settled.trade_id,
            settled.settlement_amount,
            wallet,
            transfer.tx_hash,
        )
        return settled

    async def _dispatch(self, repository: OrderRepository, order: Order) -> None:
        try:
            await self._notifier.notify(build_paid_message(order, order.updated_at))
        except Exception:
            logger.exception("Notification for order %s failed", order.trade_id)

        try:
            body = await self._callbacks.post_callback(
                order.notify_url,
                build_callback_payload(order, self._secret),
            )
        except Exception:
            logger.exception("Callback for order %s to %s failed", order.trade_id, order.notify_url)
            return

        if is_acknowledged(body):
            try:
                await repository.mark_callback_confirmed(order.id)
            except Exception:
                logger.exception("Recording callback confirmation for %s failed", order.trade_id)
        else:
            logger.warning("Callback for order %s not acknowledged: %r", order.trade_id, body[:200])
