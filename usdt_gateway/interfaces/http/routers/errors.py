"""Translate order domain errors into HTTP responses."""

from fastapi import HTTPException, status

from usdt_gateway.modules.orders import (
    DuplicateOrderError,
    NoAvailableAmountError,
    NoWalletAvailableError,
    OrderError,
    OrderNotFoundError,
    RateUnavailableError,
)

_STATUS_BY_ERROR: dict[type[OrderError], int] = {
    OrderNotFoundError: status.HTTP_404_NOT_FOUND,
    DuplicateOrderError: status.HTTP_409_CONFLICT,
    RateUnavailableError: status.HTTP_503_SERVICE_UNAVAILABLE,
    NoWalletAvailableError: status.HTTP_503_SERVICE_UNAVAILABLE,
    NoAvailableAmountError: status.HTTP_503_SERVICE_UNAVAILABLE,
}


def to_http_exception(exc: OrderError) -> HTTPException:
    return HTTPException(
        status_code=_STATUS_BY_ERROR.get(type(exc), status.HTTP_400_BAD_REQUEST),
        detail={"code": exc.code, "message": exc.message},
    )
