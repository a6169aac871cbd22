"""Merchant API: create payment transactions."""

from fastapi import APIRouter, Depends

from usdt_gateway.interfaces.http.deps import get_order_service, verify_request_signature
from usdt_gateway.modules.orders import AllocationRequest, OrderError, OrderService
from usdt_gateway.schemas import CreateTransactionRequest, CreateTransactionResponse

from .errors import to_http_exception

router = APIRouter()


@router.post(
    "/create-transaction",
    response_model=CreateTransactionResponse,
    summary="创建支付交易",
    dependencies=[Depends(verify_request_signature)],
)
async def create_transaction(
    payload: CreateTransactionRequest,
    service: OrderService = Depends(get_order_service),
) -> CreateTransactionResponse:
    try:
        result = await service.allocate(
            AllocationRequest(
                order_id=payload.order_id,
                amount=payload.amount,
                currency=payload.currency,
                notify_url=payload.notify_url,
                redirect_url=payload.redirect_url,
            )
        )
    except OrderError as exc:
        raise to_http_exception(exc) from exc

    return CreateTransactionResponse(
        trade_id=result.trade_id,
        order_id=result.order_id,
        amount=result.requested_amount,
        currency=result.requested_currency,
        actual_amount=result.settlement_amount,
        token=result.wallet_address,
        expiration_time=result.expires_at,
        payment_url=result.payment_url,
    )
