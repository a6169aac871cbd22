"""Pydantic schemas used across the project."""
from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field, field_serializer


def _to_millis(value: datetime) -> int:
    return int(value.timestamp() * 1000)


class CreateTransactionRequest(BaseModel):
    order_id: str = Field(..., min_length=1, max_length=64)
    amount: Decimal = Field(..., gt=0, max_digits=18, decimal_places=4)
    currency: Optional[str] = Field(default=None, max_length=10)
    notify_url: str = Field(..., min_length=1, max_length=255)
    redirect_url: Optional[str] = Field(default=None, max_length=255)
    signature: str = Field(..., min_length=1)


class CreateTransactionResponse(BaseModel):
    trade_id: str
    order_id: str
    amount: Decimal
    currency: str
    actual_amount: Decimal
    token: str
    expiration_time: datetime
    payment_url: str

    @field_serializer("amount", "actual_amount")
    def _serialize_amount(self, value: Decimal) -> float:
        return float(value)

    # 毫秒时间戳，与商户端约定一致
    @field_serializer("expiration_time")
    def _serialize_expiration(self, value: datetime) -> int:
        return _to_millis(value)


class CheckoutCounterResponse(BaseModel):
    trade_id: str
    actual_amount: Decimal
    token: str
    expiration_time: datetime
    redirect_url: Optional[str] = None

    @field_serializer("actual_amount")
    def _serialize_amount(self, value: Decimal) -> float:
        return float(value)

    @field_serializer("expiration_time")
    def _serialize_expiration(self, value: datetime) -> int:
        return _to_millis(value)


class OrderStatusResponse(BaseModel):
    trade_id: str
    status: str
    actual_amount: Decimal

    @field_serializer("actual_amount")
    def _serialize_amount(self, value: Decimal) -> float:
        return float(value)
