"""Main FastAPI application."""
import logging
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI

from teapos.api import auth, catalog, health, orders, sessions
from teapos.api.errors import register_error_handlers
from teapos.core.config import settings
from teapos.core.logging import setup_logging
from teapos.db.database import init_db
from teapos.services.session.manager import SessionRegistry

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    setup_logging()
    try:
        await init_db()
    except Exception as e:
        # Catalog reads fall back to the built-in menu; orders will fail loudly
        logger.error(f"Database initialization failed: {type(e).__name__}: {e}")
    app.state.sessions = SessionRegistry(
        Path(settings.cart_storage_dir),
        settings.tax_rate,
        settings.checkout_timeout_seconds,
    )
    logger.info(f"{settings.store_name} POS ready (tax rate {settings.tax_rate})")
    yield


app = FastAPI(
    title="Tea POS",
    description="Point-of-sale backend for a tea shop",
    version="0.1.0",
    lifespan=lifespan,
)

register_error_handlers(app)

app.include_router(health.router, tags=["health"])
app.include_router(auth.router, tags=["auth"])
app.include_router(catalog.router, tags=["catalog"])
app.include_router(sessions.router, tags=["sessions"])
app.include_router(orders.router, tags=["orders"])


@app.get("/")
async def root():
    return {"message": f"{settings.store_name} POS API", "version": "0.1.0"}


def run() -> None:
    """Console entry point."""
    import uvicorn

    uvicorn.run("teapos.main:app", host=settings.host, port=settings.port)
