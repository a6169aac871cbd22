"""Operator notifications through a Telegram bot."""

from __future__ import annotations

import asyncio
import logging

import aiohttp

from usdt_gateway.core.config import TelegramSettings

logger = logging.getLogger(__name__)


class TelegramNotifier:
    """Best-effort ``sendMessage`` to the management chat.

    Delivery problems are logged and never raised.
    """

    def __init__(self, settings: TelegramSettings) -> None:
        self._bot_token = settings.bot_token
        self._chat_id = settings.manage_chat_id
        self._api_uri = settings.api_uri.rstrip("/")
        self._timeout = aiohttp.ClientTimeout(total=settings.timeout)

    @property
    def enabled(self) -> bool:
        return bool(self._bot_token and self._chat_id)

    async def notify(self, message: str, parse_mode: str = "Markdown") -> None:
        if not self.enabled:
            logger.debug("Telegram notifier not configured, skipping message")
            return

        url = f"{self._api_uri}/bot{self._bot_token}/sendMessage"
        payload = {"chat_id": self._chat_id, "text": message, "parse_mode": parse_mode}
        try:
            async with aiohttp.ClientSession(timeout=self._timeout) as session:
                async with session.post(url, json=payload) as resp:
                    if resp.status != 200:
                        body = await resp.text()
                        logger.error("Telegram sendMessage returned HTTP %s: %s", resp.status, body[:200])
        except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
            logger.error("Telegram send error: %s", exc)
