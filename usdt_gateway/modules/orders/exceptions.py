"""Order domain specific exceptions.

Each caller-facing error carries the numeric code merchants already handle.
"""


class OrderError(Exception):
    """Base class for order domain errors."""

    code = 400
    message = "订单处理失败"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.message)
        if message:
            self.message = message


class DuplicateOrderError(OrderError):
    """Raised when the merchant order id has already been used."""

    code = 10002
    message = "支付交易已存在，请勿重复创建"


class NoWalletAvailableError(OrderError):
    """Raised when no wallet address is enabled."""

    code = 10003
    message = "无可用钱包地址"


class AmountTooSmallError(OrderError):
    """Raised when the settlement amount is below the configured minimum."""

    code = 10004
    message = "支付金额有误, 无法满足最小支付单位"


class NoAvailableAmountError(OrderError):
    """Raised when every (wallet, amount) slot in the search range is taken."""

    code = 10005
    message = "无可用金额通道"


class RateUnavailableError(OrderError):
    """Raised when the fiat to USDT rate could not be obtained."""

    code = 10006
    message = "汇率计算错误"


class OrderNotFoundError(OrderError):
    """Raised when the requested trade id does not exist."""

    code = 10008
    message = "支付交易不存在"


class OrderNotPendingError(OrderError):
    """Raised when the order is no longer awaiting payment."""

    code = 10009
    message = "不存在待支付订单或已过期"


class SlotTakenError(Exception):
    """Internal signal: a concurrent allocation claimed the slot first."""
