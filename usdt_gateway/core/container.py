"""Simple dependency container for wiring core services."""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache

from usdt_gateway.core.config import Settings, get_settings
from usdt_gateway.infrastructure.database.session import get_engine, get_session_factory
from usdt_gateway.infrastructure.integrations.callbacks import HttpCallbackClient
from usdt_gateway.infrastructure.integrations.rates import BinanceP2PRateSource
from usdt_gateway.infrastructure.integrations.telegram import TelegramNotifier
from usdt_gateway.infrastructure.integrations.tronscan import TronscanLedgerClient
from usdt_gateway.modules.reconciliation import ReconciliationService


@dataclass(slots=True)
class ApplicationContainer:
    settings: Settings
    rate_source: BinanceP2PRateSource
    ledger: TronscanLedgerClient
    notifier: TelegramNotifier
    callbacks: HttpCallbackClient

    @classmethod
    def from_settings(cls, settings: Settings) -> "ApplicationContainer":
        return cls(
            settings=settings,
            rate_source=BinanceP2PRateSource(settings.rate),
            ledger=TronscanLedgerClient(settings.ledger),
            notifier=TelegramNotifier(settings.telegram),
            callbacks=HttpCallbackClient(settings.callback),
        )

    def init_infrastructure(self) -> None:
        """Ensure infrastructure singletons (database engine, etc.) are initialised."""
        get_engine()

    def reconciliation_service(self) -> ReconciliationService:
        return ReconciliationService(
            get_session_factory(),
            self.ledger,
            self.notifier,
            self.callbacks,
            self.settings,
        )


@lru_cache()
def get_container() -> ApplicationContainer:
    container = ApplicationContainer.from_settings(get_settings())
    container.init_infrastructure()
    return container


__all__ = ["ApplicationContainer", "get_container"]
