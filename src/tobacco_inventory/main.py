import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request

from .core import config
from .core import logging_config  # noqa: F401  configures the package logger
from .features.dispatch.router import router as dispatch_router
from .features.reports.router import router as reports_router
from .features.sales.router import router as sales_router

logger = logging.getLogger("tobacco_inventory.main")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Application lifespan context manager.

    Nothing is kept between requests: every endpoint fetches the upstream
    records it needs, so startup only reports where they come from.
    """
    logger.info(f"Starting application, sales source: {config.SALES_API_URL}")
    logger.info(f"Dispatch source: {config.DISPATCH_API_URL}")

    yield

    logger.info("Application stopped.")


app = FastAPI(
    title="Tobacco Inventory API",
    description="Sale records, sales reports and dispatch documents for tobacco stations.",
    version="0.1.0",
    lifespan=lifespan,
)


@app.get("/")
async def read_root(request: Request):
    """
    Root endpoint for the API.
    """
    client_host = request.client.host if request.client else "unknown client"
    logger.info(f"Root endpoint '/' accessed by {client_host}")
    return {"message": f"Welcome to the {config.SYSTEM_NAME} API!"}


app.include_router(sales_router, prefix="/api/v1")
app.include_router(reports_router, prefix="/api/v1")
app.include_router(dispatch_router, prefix="/api/v1")
