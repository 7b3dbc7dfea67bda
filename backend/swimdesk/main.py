# backend/swimdesk/main.py
"""
SwimDesk API application.

Routes are mounted under /api/v1; every domain error leaves the API as a
problem-details body via ``register_error_handlers``.
"""

from contextlib import asynccontextmanager
import logging
from typing import AsyncGenerator

from fastapi import APIRouter, FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .core.config import is_running_tests, settings
from .core.constants import BRAND_NAME
from .errors import register_error_handlers
from .init_db import init_db
from .routes.v1 import (
    catch_up as catch_up_v1,
    dashboard as dashboard_v1,
    health as health_v1,
    notifications as notifications_v1,
    prometheus as prometheus_v1,
    sessions as sessions_v1,
)

# Configure logging
logging.basicConfig(
    level=settings.log_level, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)

logger = logging.getLogger(__name__)

API_VERSION = "1.0.0"


@asynccontextmanager
async def app_lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Handle application startup/shutdown."""
    logger.info(f"{BRAND_NAME} API starting up...")
    logger.info(f"Environment: {settings.environment}")
    if settings.create_tables_on_startup and not is_running_tests():
        init_db()
    yield
    logger.info(f"{BRAND_NAME} API shutting down...")


app = FastAPI(
    title=f"{BRAND_NAME} API",
    description="Class scheduling with cancellation tracking and catch-up lessons",
    version=API_VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=app_lifespan,
)

register_error_handlers(app)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_allowed_origins,
    allow_credentials=True,
    allow_methods=["GET", "HEAD", "OPTIONS", "POST", "PUT", "PATCH", "DELETE"],
    allow_headers=["*"],
)

api_v1 = APIRouter(prefix="/api/v1")
api_v1.include_router(health_v1.router)
api_v1.include_router(sessions_v1.router, prefix="/sessions")
api_v1.include_router(catch_up_v1.router, prefix="/catch-up")
api_v1.include_router(dashboard_v1.router, prefix="/dashboard")
api_v1.include_router(notifications_v1.router, prefix="/notifications")
api_v1.include_router(prometheus_v1.router, prefix="/metrics")
app.include_router(api_v1)

# ASGI entrypoint alias
fastapi_app = app
