"""Main application entry point."""

import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Response
from prometheus_fastapi_instrumentator import Instrumentator

from storefront.ai.llm_service import llm_service
from storefront.api.routes import assistant, auth, categories, leads, orders, products
from storefront.catalog.seed import initial_categories, initial_products
from storefront.catalog.store import catalog_store
from storefront.config import settings
from storefront.db.session import init_db

# Configure structured logging
from storefront.logging_config import setup_logging

setup_logging()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    # Startup
    logger.info(f"Starting {settings.business_name} storefront...")

    await init_db()

    if settings.seed_catalog and not catalog_store.products:
        seed = initial_products()
        catalog_store.load(seed, initial_categories(seed))
        logger.info(f"Seeded catalog with {len(seed)} products")

    if not settings.openai_api_key:
        logger.warning("OPENAI_API_KEY is not set; assistant and lead discovery will report a configuration error")

    yield

    # Shutdown
    logger.info("Shutting down...")
    await llm_service.close()
    logger.info("Shutdown complete")


# Create FastAPI app
app = FastAPI(
    title="Gadget Wall Storefront",
    description="Sales assistant, catalog, inbound stock, orders and lead discovery",
    version="0.1.0",
    lifespan=lifespan,
)

# Add Prometheus instrumentation
instrumentator = Instrumentator(
    should_group_status_codes=True,
    should_ignore_untemplated=True,
    should_respect_env_var=True,
    should_instrument_requests_inprogress=True,
    excluded_handlers=["/metrics", "/health", "/favicon.ico"],
    inprogress_name="http_requests_inprogress",
    inprogress_labels=True,
)
instrumentator.instrument(app).expose(app, include_in_schema=True, tags=["monitoring"])

# Include API routes
app.include_router(products.router)
app.include_router(categories.router)
app.include_router(orders.router)
app.include_router(orders.invoice_router)
app.include_router(assistant.router)
app.include_router(leads.router)
app.include_router(auth.router)


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy"}


@app.get("/favicon.ico")
async def favicon():
    """Return empty favicon response to avoid 404 noise."""
    return Response(status_code=204)


def run():
    """Console entry point."""
    uvicorn.run(
        "storefront.main:app",
        host=settings.app_host,
        port=settings.app_port,
        reload=settings.debug,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    run()
