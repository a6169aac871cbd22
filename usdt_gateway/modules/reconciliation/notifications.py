"""Operator message and merchant callback payload for a paid order."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from usdt_gateway.core.signing import SIGNATURE_FIELD, generate_signature
from usdt_gateway.modules.orders.models import Order

_TIME_FORMAT = "%Y-%m-%d %H:%M:%S %Z"


def build_paid_message(order: Order, paid_at: datetime) -> str:
    sections = [
        ("交易号", order.trade_id),
        ("订单号", order.order_id),
        ("交易哈希", order.ledger_tx_id or ""),
        ("请求支付金额", f"{order.requested_amount:f} {order.requested_currency}"),
        ("实际支付金额", f"{order.settlement_amount:f} USDT"),
        ("钱包地址", order.wallet_address),
        ("订单创建时间", order.created_at.strftime(_TIME_FORMAT)),
        ("支付成功时间", paid_at.strftime(_TIME_FORMAT)),
    ]
    lines = ["📢📢有新的交易支付成功！"]
    for title, value in sections:
        lines.append(f"```{title}：\n{value}\n```")
    return "\n".join(lines)


def build_callback_payload(order: Order, secret: str) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "trade_id": order.trade_id,
        "order_id": order.order_id,
        "amount": float(order.requested_amount),
        "actual_amount": float(order.settlement_amount),
        "token": order.wallet_address,
        "block_transaction_id": order.ledger_tx_id,
        "status": order.status.value,
    }
    payload[SIGNATURE_FIELD] = generate_signature(payload, secret)
    return payload


def is_acknowledged(body: str) -> bool:
    return body.strip().lower() in {"success", "ok"}
