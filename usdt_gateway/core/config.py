"""Application configuration using pydantic settings with structured sections."""

from decimal import Decimal
from functools import lru_cache
from typing import Literal, Optional

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ServerSettings(BaseModel):
    host: str = "0.0.0.0"
    port: int = 8000
    reload: bool = False


class DatabaseSettings(BaseModel):
    url: str = Field(default="sqlite+aiosqlite:///./usdt_gateway.db", alias="url")
    echo: bool = False
    # seconds a SQLite connection waits for the write lock
    busy_timeout: float = Field(default=30.0, gt=0)
    pool_size: Optional[int] = None
    max_overflow: Optional[int] = None


class GatewaySettings(BaseModel):
    app_uri: str = "http://127.0.0.1:8000"
    api_auth_token: str = Field(default="change-me", min_length=8)
    order_expiration_minutes: int = Field(default=10, gt=0)
    default_currency: str = "CNY"
    # 以这些币种计价的请求直接按 USDT 金额处理，不查询汇率
    crypto_currencies: list[str] = Field(default_factory=lambda: ["USD", "USDT"])
    min_settlement_amount: Decimal = Decimal("0.01")
    max_increments: int = Field(default=100, gt=0)
    accept_late_payments: bool = False


class RateSettings(BaseModel):
    forced_usdt_rate: Optional[Decimal] = None
    endpoint: str = "https://p2p.binance.com/bapi/c2c/v2/friendly/c2c/adv/search"
    timeout: float = 10.0


class LedgerSettings(BaseModel):
    api_uri: str = "https://apilist.tronscanapi.com/api/transfer/trc20"
    trc20_contract: str = "TR7NHqjeKQxGTCi8q8ZY4pL8otSzgjLj6t"
    token_decimals: int = 6
    api_key: Optional[str] = None
    window_hours: int = Field(default=24, gt=0)
    page_limit: int = Field(default=50, gt=0)
    timeout: float = 15.0


class TelegramSettings(BaseModel):
    bot_token: Optional[str] = None
    manage_chat_id: Optional[str] = None
    api_uri: str = "https://api.telegram.org"
    timeout: float = 10.0


class CallbackSettings(BaseModel):
    timeout: float = 10.0


class LoggingSettings(BaseModel):
    level: str = "INFO"
    format: str = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


class Settings(BaseSettings):
    """Top-level application settings with nested sections."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_nested_delimiter="__",
        extra="ignore",
        case_sensitive=False,
    )

    environment: Literal["development", "staging", "production", "test"] = "development"
    debug: bool = False
    project_name: str = "USDT Gateway"
    api_prefix: str = "/api"

    server: ServerSettings = ServerSettings()
    database: DatabaseSettings = DatabaseSettings()
    gateway: GatewaySettings = GatewaySettings()
    rate: RateSettings = RateSettings()
    ledger: LedgerSettings = LedgerSettings()
    telegram: TelegramSettings = TelegramSettings()
    callback: CallbackSettings = CallbackSettings()
    logging: LoggingSettings = LoggingSettings()

    @property
    def database_url(self) -> str:
        return self.database.url

    @property
    def host(self) -> str:
        return self.server.host

    @property
    def port(self) -> int:
        return self.server.port

    @property
    def api_auth_token(self) -> str:
        return self.gateway.api_auth_token


@lru_cache()
def get_settings() -> Settings:
    return Settings()
