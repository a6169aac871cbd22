"""Order domain service: slot allocation and order reads."""

from __future__ import annotations

import logging
import secrets
import string
import time
from collections.abc import Callable
from datetime import datetime, timezone
from decimal import Decimal
from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from usdt_gateway.core.config import GatewaySettings, Settings, get_settings
from usdt_gateway.infrastructure.integrations.exceptions import IntegrationError
from usdt_gateway.modules.wallets.repository import WalletRepository

from .allocation import candidate_slots
from .amounts import fiat_to_units, from_units, to_units
from .exceptions import (
    AmountTooSmallError,
    DuplicateOrderError,
    NoAvailableAmountError,
    NoWalletAvailableError,
    OrderNotFoundError,
    OrderNotPendingError,
    RateUnavailableError,
    SlotTakenError,
)
from .models import (
    AllocationRequest,
    AllocationResult,
    CheckoutDetails,
    NewOrder,
    Order,
    OrderStatus,
    OrderStatusView,
)
from .repository import OrderRepository

logger = logging.getLogger(__name__)

_TRADE_ID_ALPHABET = string.digits + string.ascii_uppercase


class RateSource(Protocol):
    async def get_rate(self, currency: str) -> Decimal:
        """Price of one USDT in ``currency``."""
        ...


def generate_trade_id() -> str:
    suffix = "".join(secrets.choice(_TRADE_ID_ALPHABET) for _ in range(6))
    return f"T{int(time.time() * 1000)}{suffix}"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class OrderService:
    """Allocates unique payment slots and answers order queries."""

    def __init__(
        self,
        repository: OrderRepository,
        wallets: WalletRepository,
        rate_source: RateSource | None,
        settings: GatewaySettings,
        *,
        app_uri: str = "",
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._repository = repository
        self._wallets = wallets
        self._rate_source = rate_source
        self._settings = settings
        self._app_uri = app_uri.rstrip("/")
        self._clock = clock

    @classmethod
    def with_session(
        cls,
        session: AsyncSession,
        rate_source: RateSource,
        settings: Settings | None = None,
    ) -> "OrderService":
        # 延迟导入仓储实现，避免循环依赖
        from usdt_gateway.infrastructure.database.repositories import SqlOrderRepository, SqlWalletRepository

        settings = settings or get_settings()
        return cls(
            SqlOrderRepository(session),
            SqlWalletRepository(session),
            rate_source,
            settings.gateway,
            app_uri=settings.gateway.app_uri,
        )

    @property
    def expiration_minutes(self) -> int:
        return self._settings.order_expiration_minutes

    async def allocate(self, request: AllocationRequest) -> AllocationResult:
        if await self._repository.order_id_exists(request.order_id):
            raise DuplicateOrderError()

        currency = (request.currency or self._settings.default_currency).upper()
        base_units = await self._base_units(request.amount, currency)
        if base_units < to_units(self._settings.min_settlement_amount):
            raise AmountTooSmallError()

        wallets = await self._wallets.list_enabled_addresses()
        if not wallets:
            raise NoWalletAvailableError()

        max_increments = self._settings.max_increments
        occupied = await self._repository.list_pending_slots(
            wallets,
            base_units,
            base_units + max_increments - 1,
        )
        new_order = NewOrder(
            trade_id=generate_trade_id(),
            order_id=request.order_id,
            requested_amount_units=to_units(request.amount),
            requested_currency=currency,
            notify_url=request.notify_url,
            redirect_url=request.redirect_url,
        )

        for slot in candidate_slots(base_units, wallets, frozenset(occupied), max_increments):
            try:
                order = await self._repository.claim_slot(new_order, slot)
            except SlotTakenError:
                logger.info(
                    "Slot %s / %s claimed concurrently, trying next candidate",
                    slot.wallet_address,
                    from_units(slot.settlement_units),
                )
                continue
            logger.info(
                "Order %s allocated: trade_id=%s wallet=%s amount=%s",
                order.order_id,
                order.trade_id,
                order.wallet_address,
                order.settlement_amount,
            )
            return self._to_result(order)

        logger.warning("No free slot for order %s starting at %s", request.order_id, from_units(base_units))
        raise NoAvailableAmountError()

    async def get_status(self, trade_id: str) -> OrderStatusView:
        order = await self._get_order(trade_id)
        return OrderStatusView(
            trade_id=order.trade_id,
            status=order.public_status(self.expiration_minutes, self._clock()),
            settlement_amount=order.settlement_amount,
        )

    async def get_checkout_details(self, trade_id: str) -> CheckoutDetails:
        order = await self._get_order(trade_id)
        if order.public_status(self.expiration_minutes, self._clock()) != OrderStatus.PENDING:
            raise OrderNotPendingError()
        return CheckoutDetails(
            trade_id=order.trade_id,
            settlement_amount=order.settlement_amount,
            wallet_address=order.wallet_address,
            expires_at=order.expires_at(self.expiration_minutes),
            redirect_url=order.redirect_url,
        )

    async def _get_order(self, trade_id: str) -> Order:
        order = await self._repository.get_by_trade_id(trade_id)
        if order is None:
            raise OrderNotFoundError()
        return order

    async def _base_units(self, amount: Decimal, currency: str) -> int:
        if currency in {code.upper() for code in self._settings.crypto_currencies}:
            return to_units(amount)
        if self._rate_source is None:
            raise RateUnavailableError()
        try:
            rate = await self._rate_source.get_rate(currency)
            return fiat_to_units(amount, rate)
        except (IntegrationError, ValueError) as exc:
            logger.error("Failed to obtain %s/USDT rate: %s", currency, exc)
            raise RateUnavailableError() from exc

    def _to_result(self, order: Order) -> AllocationResult:
        return AllocationResult(
            trade_id=order.trade_id,
            order_id=order.order_id,
            requested_amount=order.requested_amount,
            requested_currency=order.requested_currency,
            settlement_amount=order.settlement_amount,
            wallet_address=order.wallet_address,
            expires_at=order.expires_at(self.expiration_minutes),
            payment_url=f"{self._app_uri}/pay/checkout-counter/{order.trade_id}",
        )
