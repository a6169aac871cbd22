from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from usdt_gateway import __version__
from usdt_gateway.core.config import get_settings
from usdt_gateway.core.logging import configure_logging
from usdt_gateway.infrastructure.database.session import dispose_engine, init_db
from usdt_gateway.interfaces.http.routers import create_api_router, create_pay_router

settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    if settings.environment == "development":
        await init_db()
    yield
    await dispose_engine()


def create_app() -> FastAPI:
    configure_logging(settings)
    app = FastAPI(
        title=settings.project_name,
        description="USDT-TRC20 收款网关",
        version=__version__,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(create_api_router(settings.api_prefix))
    app.include_router(create_pay_router())

    @app.get("/health", summary="健康检查")
    async def health() -> dict[str, str]:
        return {"status": "ok", "version": __version__}

    return app


app = create_app()
