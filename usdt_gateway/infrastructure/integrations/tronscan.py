"""TRC20 transfer history from the Tronscan API."""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from typing import Any

import aiohttp

from usdt_gateway.core.config import LedgerSettings
from usdt_gateway.modules.reconciliation.models import LedgerTransfer

from .exceptions import LedgerQueryError
from .rates import USER_AGENT

logger = logging.getLogger(__name__)

# direction=2: transfers into the queried address
DIRECTION_INCOMING = "2"


def _to_millis(value: datetime) -> int:
    return int(value.timestamp() * 1000)


def parse_transfer(record: dict[str, Any]) -> LedgerTransfer:
    try:
        return LedgerTransfer(
            to_address=str(record["to"]),
            amount_raw=int(record["amount"]),
            status=str(record.get("contract_ret") or ""),
            block_timestamp=datetime.fromtimestamp(int(record["block_timestamp"]) / 1000, tz=timezone.utc),
            tx_hash=str(record["hash"]),
        )
    except (KeyError, TypeError, ValueError) as exc:
        raise LedgerQueryError(f"malformed transfer record: {exc!r}") from exc


def parse_transfers(payload: Any) -> list[LedgerTransfer]:
    if not isinstance(payload, dict):
        raise LedgerQueryError("unexpected ledger response")
    records = payload.get("data") or []
    return [parse_transfer(record) for record in records]


class TronscanLedgerClient:
    def __init__(self, settings: LedgerSettings) -> None:
        self._api_uri = settings.api_uri
        self._contract = settings.trc20_contract
        self._page_limit = settings.page_limit
        self._timeout = aiohttp.ClientTimeout(total=settings.timeout)
        self._headers = {"User-Agent": USER_AGENT}
        if settings.api_key:
            self._headers["TRON-PRO-API-KEY"] = settings.api_key

    def build_params(self, wallet: str, start: datetime, end: datetime) -> dict[str, str]:
        return {
            "sort": "-timestamp",
            "limit": str(self._page_limit),
            "start": "0",
            "direction": DIRECTION_INCOMING,
            "db_version": "1",
            "trc20Id": self._contract,
            "address": wallet,
            "start_timestamp": str(_to_millis(start)),
            "end_timestamp": str(_to_millis(end)),
        }

    async def list_transfers(self, wallet: str, start: datetime, end: datetime) -> list[LedgerTransfer]:
        params = self.build_params(wallet, start, end)
        try:
            async with aiohttp.ClientSession(timeout=self._timeout, headers=self._headers) as session:
                async with session.get(self._api_uri, params=params) as resp:
                    if resp.status != 200:
                        raise LedgerQueryError(f"HTTP {resp.status} from Tronscan for {wallet}")
                    payload = await resp.json(content_type=None)
        except asyncio.TimeoutError as exc:
            raise LedgerQueryError(f"Tronscan request for {wallet} timed out") from exc
        except aiohttp.ClientError as exc:
            raise LedgerQueryError(f"Tronscan request for {wallet} failed: {exc}") from exc

        transfers = parse_transfers(payload)
        logger.debug("Fetched %d transfers for %s", len(transfers), wallet)
        return transfers
