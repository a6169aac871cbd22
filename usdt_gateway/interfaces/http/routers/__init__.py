from fastapi import APIRouter

from . import orders, pay


def create_api_router(prefix: str = "") -> APIRouter:
    router = APIRouter(prefix=prefix)
    router.include_router(orders.router, prefix="/v1/order", tags=["订单"])
    return router


def create_pay_router() -> APIRouter:
    router = APIRouter()
    router.include_router(pay.router, prefix="/pay", tags=["收银台"])
    return router


__all__ = [
    "create_api_router",
    "create_pay_router",
]
