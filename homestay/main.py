import logging
import os
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi.middleware import SlowAPIMiddleware

from homestay.api.routers import auth, bookings, health, houses
from homestay.core.config import Settings
from homestay.core.errors import register_exception_handlers
from homestay.core.logging import setup_logging
from homestay.core.rate_limiter import limiter
from homestay.database import Database
from homestay.middleware.request_logger import RequestLoggerMiddleware
from homestay.services.geocoding_service import GeocodingService

logger = logging.getLogger(__name__)


def create_app(
    settings: Optional[Settings] = None,
    database: Optional[Database] = None,
    configure_logging: bool = True,
) -> FastAPI:
    """Build the API; settings and database are created here and shared via app.state."""
    settings = settings or Settings.from_env()
    if configure_logging:
        setup_logging(settings)

    database = database or Database.from_settings(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Homestay API startup")
        await database.create_all()
        yield
        await database.dispose()
        logger.info("Homestay API shutdown")

    app = FastAPI(
        title="Homestay API",
        description="Vacation rental listings and bookings",
        version="1.0.0",
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.db = database
    app.state.geocoder = GeocodingService(settings)

    # -------------------------------------------------
    # Rate Limiting (slowapi)
    # -------------------------------------------------
    limiter.enabled = settings.rate_limit_enabled
    app.state.limiter = limiter
    app.add_middleware(SlowAPIMiddleware)
    app.add_middleware(
        RequestLoggerMiddleware,
        slow_threshold_ms=settings.log_slow_request_threshold_ms,
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    app.include_router(health.router)
    app.include_router(auth.router)
    app.include_router(houses.router)
    app.include_router(bookings.router)

    return app


if __name__ == "__main__":
    import uvicorn

    port = int(os.getenv("PORT", 8000))
    uvicorn.run(create_app(), host="0.0.0.0", port=port)
