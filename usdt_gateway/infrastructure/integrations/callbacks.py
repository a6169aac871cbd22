"""Delivery of signed payment callbacks to merchants."""

from __future__ import annotations

import asyncio
from typing import Any

import aiohttp

from usdt_gateway.core.config import CallbackSettings

from .exceptions import CallbackDeliveryError


class HttpCallbackClient:
    def __init__(self, settings: CallbackSettings) -> None:
        self._timeout = aiohttp.ClientTimeout(total=settings.timeout)

    async def post_callback(self, url: str, payload: dict[str, Any]) -> str:
        """POST ``payload`` as JSON and return the response body."""
        try:
            async with aiohttp.ClientSession(timeout=self._timeout) as session:
                async with session.post(url, json=payload) as resp:
                    body = await resp.text()
                    if resp.status >= 400:
                        raise CallbackDeliveryError(f"HTTP {resp.status} from {url}")
                    return body
        except asyncio.TimeoutError as exc:
            raise CallbackDeliveryError(f"callback to {url} timed out") from exc
        except aiohttp.ClientError as exc:
            raise CallbackDeliveryError(f"callback to {url} failed: {exc}") from exc
