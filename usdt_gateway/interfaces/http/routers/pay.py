"""Payer-facing endpoints: checkout counter and status polling."""

from fastapi import APIRouter, Depends, Path

from usdt_gateway.interfaces.http.deps import get_order_service
from usdt_gateway.modules.orders import OrderError, OrderService
from usdt_gateway.schemas import CheckoutCounterResponse, OrderStatusResponse

from .errors import to_http_exception

router = APIRouter()


@router.get(
    "/checkout-counter/{trade_id}",
    response_model=CheckoutCounterResponse,
    summary="收银台信息",
)
async def checkout_counter(
    trade_id: str = Path(..., min_length=1, max_length=32),
    service: OrderService = Depends(get_order_service),
) -> CheckoutCounterResponse:
    try:
        details = await service.get_checkout_details(trade_id)
    except OrderError as exc:
        raise to_http_exception(exc) from exc
    return CheckoutCounterResponse(
        trade_id=details.trade_id,
        actual_amount=details.settlement_amount,
        token=details.wallet_address,
        expiration_time=details.expires_at,
        redirect_url=details.redirect_url,
    )


@router.get(
    "/check-status/{trade_id}",
    response_model=OrderStatusResponse,
    summary="查询支付状态",
)
async def check_status(
    trade_id: str = Path(..., min_length=1, max_length=32),
    service: OrderService = Depends(get_order_service),
) -> OrderStatusResponse:
    try:
        view = await service.get_status(trade_id)
    except OrderError as exc:
        raise to_http_exception(exc) from exc
    return OrderStatusResponse(
        trade_id=view.trade_id,
        status=view.status.value,
        actual_amount=view.settlement_amount,
    )
