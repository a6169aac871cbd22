"""SQLAlchemy ORM models."""
import uuid
from datetime import datetime, timezone

from sqlalchemy import BigInteger, Boolean, Column, DateTime, Index, Integer, String, text
from sqlalchemy.sql import func

from usdt_gateway.infrastructure.database.base import Base

ORDER_STATUS_PENDING = "pending"
ORDER_STATUS_PAID = "paid"

# 同一钱包 + 同一金额只能存在一笔待支付订单
PENDING_SLOT_INDEX = "uq_orders_pending_slot"


def generate_uuid() -> str:
    return str(uuid.uuid4())


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Order(Base):
    __tablename__ = "orders"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    trade_id = Column(String(32), unique=True, nullable=False, index=True)
    order_id = Column(String(64), unique=True, nullable=False, index=True)
    requested_amount_units = Column(BigInteger, nullable=False)
    requested_currency = Column(String(10), nullable=False, default="CNY")
    settlement_units = Column(BigInteger, nullable=False)
    wallet_address = Column(String(64), nullable=False, index=True)
    status = Column(String(20), nullable=False, default=ORDER_STATUS_PENDING)  # pending, paid
    notify_url = Column(String(255), nullable=False)
    redirect_url = Column(String(255))
    ledger_tx_id = Column(String(128))
    callback_confirmed = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    __table_args__ = (
        Index(
            PENDING_SLOT_INDEX,
            "wallet_address",
            "settlement_units",
            unique=True,
            sqlite_where=text("status = 'pending'"),
            postgresql_where=text("status = 'pending'"),
        ),
    )


class WalletAddress(Base):
    __tablename__ = "wallet_addresses"

    id = Column(Integer, primary_key=True, autoincrement=True)
    address = Column(String(64), unique=True, nullable=False)
    is_enabled = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())
