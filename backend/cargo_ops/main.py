import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from cargo_ops.api.router import api_router
from cargo_ops.config import APP_VERSION, settings
from cargo_ops.database import engine
from cargo_ops.middleware.logging import RequestLoggingMiddleware

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s %(levelname)-8s %(name)s - %(message)s",
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Initialize Sentry if DSN is configured
    if settings.sentry_dsn:
        try:
            import sentry_sdk
            sentry_sdk.init(
                dsn=settings.sentry_dsn,
                traces_sample_rate=0.1,
                environment=settings.environment,
            )
            logger.info("Sentry initialized (env=%s)", settings.environment)
        except Exception as e:
            logger.warning("Failed to initialize Sentry: %s", e)

    logger.info(
        "Starting Cargo Ops backend (env=%s, scan debounce=%dms)",
        settings.environment, settings.scan_debounce_ms,
    )
    yield
    await engine.dispose()
    logger.info("Shutting down Cargo Ops backend")


app = FastAPI(
    title="Cargo Ops - Shipment, Manifest and Invoice Core",
    description="Shipment status tracking, idempotent manifest scanning and freight invoice validation",
    version=APP_VERSION,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_middleware(RequestLoggingMiddleware)

app.include_router(api_router, prefix="/api")
