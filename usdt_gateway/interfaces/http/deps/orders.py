"""Order related dependency providers."""

from __future__ import annotations

from typing import Any

from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from usdt_gateway.core.container import ApplicationContainer, get_container
from usdt_gateway.core.signing import SIGNATURE_FIELD, verify_signature
from usdt_gateway.modules.orders import OrderService

from .database import get_db_session


def get_order_service(
    db: AsyncSession = Depends(get_db_session),
    container: ApplicationContainer = Depends(get_container),
) -> OrderService:
    return OrderService.with_session(db, container.rate_source, container.settings)


async def verify_request_signature(
    request: Request,
    container: ApplicationContainer = Depends(get_container),
) -> None:
    """Check the merchant signature over the raw JSON body."""
    try:
        body: Any = await request.json()
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="请求体格式错误") from exc
    if not isinstance(body, dict):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="请求体格式错误")
    if not verify_signature(body, body.get(SIGNATURE_FIELD), container.settings.api_auth_token):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="签名认证错误")


__all__ = ["get_order_service", "verify_request_signature"]
