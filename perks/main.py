"""
Main FastAPI application entry point.
"""
import logging
import multiprocessing
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from perks.core.config import settings
from perks.core.database import async_engine
from perks.core.handlers import register_exception_handlers
from perks.helpers.migrations import apply_migrations
from perks.managers.redis_manager import redis_manager
from perks.middleware.rate_limit import RateLimitMiddleware
from perks.routers import auth, claims, deals, health

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Starting up...")
    if settings.RUN_MIGRATIONS_ON_STARTUP:
        logger.info("Run alembic upgrade head...")
        process = multiprocessing.Process(target=apply_migrations)
        process.start()
        process.join()
        if process.exitcode != 0:
            raise RuntimeError(f"Database migrations failed with exit code {process.exitcode}")
        logger.info("Finished alembic upgrade.")
    yield  # Control returns to the application during runtime
    logger.info("Shutting down...")
    await redis_manager.close()
    await async_engine.dispose()


app = FastAPI(
    title=settings.PROJECT_NAME,
    description="API for browsing and claiming startup SaaS deals",
    version="1.0.0",
    openapi_url="/openapi.json",
    lifespan=lifespan,
    debug=settings.DEBUG,
    docs_url="/docs",
    redoc_url="/redoc"
)


def install_middleware(app: FastAPI, rate_limit: bool = settings.RATE_LIMIT_ENABLED, **rate_limit_options) -> None:
    # The last middleware added runs outermost; CORS must also wrap 429 responses
    if rate_limit:
        app.add_middleware(RateLimitMiddleware, **rate_limit_options)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.CLIENT_URL],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )


install_middleware(app)

register_exception_handlers(app)

# Include routers
app.include_router(auth.router, prefix=f"{settings.API_PREFIX}/auth", tags=["Auth"])
app.include_router(deals.router, prefix=f"{settings.API_PREFIX}/deals", tags=["Deals"])
app.include_router(claims.router, prefix=f"{settings.API_PREFIX}/claims", tags=["Claims"])
app.include_router(health.router, prefix="/health", tags=["HealthCheck"])
