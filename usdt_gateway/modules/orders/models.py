"""Domain models for payment orders."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from enum import Enum
from typing import Optional

from .amounts import from_units


class OrderStatus(str, Enum):
    PENDING = "pending"
    PAID = "paid"
    # 仅在读取时根据创建时间推导，不会写入数据库
    EXPIRED = "expired"


def ensure_utc(value: datetime) -> datetime:
    # SQLite drops tzinfo on read; stored values are always UTC.
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


@dataclass(slots=True)
class Order:
    id: str
    trade_id: str
    order_id: str
    requested_amount_units: int
    requested_currency: str
    settlement_units: int
    wallet_address: str
    status: OrderStatus
    notify_url: str
    redirect_url: Optional[str]
    ledger_tx_id: Optional[str]
    callback_confirmed: bool
    created_at: datetime
    updated_at: datetime

    @property
    def requested_amount(self) -> Decimal:
        return from_units(self.requested_amount_units)

    @property
    def settlement_amount(self) -> Decimal:
        return from_units(self.settlement_units)

    def expires_at(self, expiration_minutes: int) -> datetime:
        return self.created_at + timedelta(minutes=expiration_minutes)

    def is_expired(self, expiration_minutes: int, now: datetime) -> bool:
        return now > self.expires_at(expiration_minutes)

    def public_status(self, expiration_minutes: int, now: datetime) -> OrderStatus:
        if self.status == OrderStatus.PENDING and self.is_expired(expiration_minutes, now):
            return OrderStatus.EXPIRED
        return self.status


@dataclass(slots=True)
class AllocationRequest:
    order_id: str
    amount: Decimal
    notify_url: str
    redirect_url: Optional[str] = None
    currency: Optional[str] = None


@dataclass(slots=True)
class NewOrder:
    """Values for a pending order about to claim a slot."""

    trade_id: str
    order_id: str
    requested_amount_units: int
    requested_currency: str
    notify_url: str
    redirect_url: Optional[str]


@dataclass(slots=True)
class AllocationResult:
    trade_id: str
    order_id: str
    requested_amount: Decimal
    requested_currency: str
    settlement_amount: Decimal
    wallet_address: str
    expires_at: datetime
    payment_url: str


@dataclass(slots=True)
class OrderStatusView:
    trade_id: str
    status: OrderStatus
    settlement_amount: Decimal


@dataclass(slots=True)
class CheckoutDetails:
    trade_id: str
    settlement_amount: Decimal
    wallet_address: str
    expires_at: datetime
    redirect_url: Optional[str]
