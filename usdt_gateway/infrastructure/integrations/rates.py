"""USDT exchange rate from Binance P2P adverts."""

from __future__ import annotations

import asyncio
import logging
from decimal import Decimal, InvalidOperation
from typing import Any, Optional

import aiohttp

from usdt_gateway.core.config import RateSettings

from .exceptions import RateSourceError

logger = logging.getLogger(__name__)

USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/91.0.4472.124 Safari/537.36"
)


def build_search_payload(currency: str) -> dict[str, Any]:
    return {
        "fiat": currency.upper(),
        "page": 1,
        "rows": 10,
        "transAmount": 0,
        "tradeType": "SELL",
        "asset": "USDT",
        "countries": [],
        "proMerchantAds": False,
        "shieldMerchantAds": False,
        "filterType": "all",
        "periods": [],
        "additionalKycVerifyFilter": 0,
        "publisherType": None,
        "payTypes": [],
        "classifies": ["mass", "profession"],
    }


def parse_first_price(data: Any) -> Decimal:
    """Price of the first advert in a search response."""
    try:
        adverts = data["data"]
        price = Decimal(str(adverts[0]["adv"]["price"]))
    except (KeyError, IndexError, TypeError, InvalidOperation) as exc:
        raise RateSourceError(f"unexpected P2P response: {exc!r}") from exc
    if price <= 0:
        raise RateSourceError(f"non-positive P2P price: {price}")
    return price


class BinanceP2PRateSource:
    def __init__(self, settings: RateSettings) -> None:
        self._forced_rate: Optional[Decimal] = settings.forced_usdt_rate
        self._endpoint = settings.endpoint
        self._timeout = aiohttp.ClientTimeout(total=settings.timeout)

    async def get_rate(self, currency: str) -> Decimal:
        if self._forced_rate is not None:
            return self._forced_rate

        try:
            async with aiohttp.ClientSession(
                timeout=self._timeout,
                headers={"User-Agent": USER_AGENT},
            ) as session:
                async with session.post(self._endpoint, json=build_search_payload(currency)) as resp:
                    if resp.status != 200:
                        raise RateSourceError(f"HTTP {resp.status} from P2P search")
                    data = await resp.json(content_type=None)
        except asyncio.TimeoutError as exc:
            raise RateSourceError("P2P rate request timed out") from exc
        except aiohttp.ClientError as exc:
            raise RateSourceError(f"P2P rate request failed: {exc}") from exc

        price = parse_first_price(data)
        logger.debug("USDT/%s rate: %s", currency, price)
        return price
