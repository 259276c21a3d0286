"""FastAPI dependencies."""

from sqlalchemy.ext.asyncio import AsyncSession

from storefront.ai.assistant import SalesAssistant, sales_assistant
from storefront.ai.lead_discovery import LeadDiscoveryEngine, lead_discovery_engine
from storefront.catalog.csv_import import ImportRegistry, import_registry
from storefront.catalog.store import CatalogStore, catalog_store
from storefront.db.session import get_db


async def get_database() -> AsyncSession:
    """Dependency for database session."""
    async for session in get_db():
        yield session
        break  # Only yield once, as FastAPI handles the session lifecycle


def get_catalog() -> CatalogStore:
    return catalog_store


def get_import_registry() -> ImportRegistry:
    return import_registry


def get_assistant() -> SalesAssistant:
    return sales_assistant


def get_lead_engine() -> LeadDiscoveryEngine:
    return lead_discovery_engine
