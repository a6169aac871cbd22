from __future__ import annotations

from collections.abc import Callable
from datetime import datetime

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from fakes import FakeLedger, FakeRateSource, RecordingCallbacks, RecordingNotifier
from usdt_gateway.core.config import DatabaseSettings, GatewaySettings, Settings
from usdt_gateway.infrastructure.database.repositories import SqlOrderRepository, SqlWalletRepository
from usdt_gateway.infrastructure.database.session import create_engine_from_settings, init_db
from usdt_gateway.modules.orders import OrderService
from usdt_gateway.modules.reconciliation import ReconciliationService

TEST_SECRET = "test-secret-token"
APP_URI = "https://pay.example.com"
WALLET_A = "TJRabPrwbZy45sbavfcjinPJC18kjpRTv8"
WALLET_B = "TXLAQ63Xg1NAzckPwKHvzw7CSEmLMEqcdj"


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        _env_file=None,
        environment="test",
        database=DatabaseSettings(url=f"sqlite+aiosqlite:///{tmp_path / 'gateway.db'}"),
        gateway=GatewaySettings(app_uri=APP_URI, api_auth_token=TEST_SECRET),
    )


@pytest_asyncio.fixture
async def engine(settings):
    engine = create_engine_from_settings(settings.database)
    await init_db(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)


async def add_wallets(session_factory, *addresses: str) -> None:
    async with session_factory() as session:
        repository = SqlWalletRepository(session)
        for address in addresses:
            await repository.add_wallet(address)
        await session.commit()


@pytest_asyncio.fixture
async def wallets(session_factory) -> list[str]:
    await add_wallets(session_factory, WALLET_A, WALLET_B)
    return [WALLET_A, WALLET_B]


@pytest.fixture
def rate_source() -> FakeRateSource:
    return FakeRateSource()


@pytest.fixture
def make_order_service(settings, rate_source) -> Callable[..., OrderService]:
    def factory(session: AsyncSession, *, clock: Callable[[], datetime] | None = None) -> OrderService:
        kwargs = {"app_uri": settings.gateway.app_uri}
        if clock is not None:
            kwargs["clock"] = clock
        return OrderService(
            SqlOrderRepository(session),
            SqlWalletRepository(session),
            rate_source,
            settings.gateway,
            **kwargs,
        )

    return factory


@pytest.fixture
def ledger() -> FakeLedger:
    return FakeLedger()


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def callbacks() -> RecordingCallbacks:
    return RecordingCallbacks()


@pytest.fixture
def make_reconciler(session_factory, ledger, notifier, callbacks, settings) -> Callable[..., ReconciliationService]:
    def factory(*, clock: Callable[[], datetime] | None = None, **overrides) -> ReconciliationService:
        kwargs = {"clock": clock} if clock is not None else {}
        return ReconciliationService(
            session_factory,
            overrides.get("ledger", ledger),
            overrides.get("notifier", notifier),
            overrides.get("callbacks", callbacks),
            overrides.get("settings", settings),
            **kwargs,
        )

    return factory
