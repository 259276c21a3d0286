"""Shared fixtures: a seeded catalog, an in-memory database and a fake LLM."""

from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from storefront.ai.assistant import SalesAssistant
from storefront.ai.lead_discovery import LeadDiscoveryEngine
from storefront.ai.llm_service import GroundedResponse
from storefront.catalog.csv_import import ImportRegistry
from storefront.catalog.seed import initial_categories, initial_products
from storefront.catalog.store import CatalogStore
from storefront.db.models import Base
from storefront.sales.orders import OrderLedger


@pytest.fixture
def catalog():
    store = CatalogStore()
    seed = initial_products()
    store.load(seed, initial_categories(seed))
    return store


@pytest.fixture
def fake_llm():
    llm = MagicMock()
    llm.chat = AsyncMock(return_value="Hello! How can I help?")
    llm.grounded_search = AsyncMock(return_value=GroundedResponse(text="[]", chunks=[]))
    return llm


@pytest.fixture
def assistant(fake_llm, catalog):
    return SalesAssistant(llm=fake_llm, catalog=catalog, ledger=OrderLedger())


@pytest_asyncio.fixture
async def session_factory():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(session_factory):
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def client(session_factory, catalog, assistant, fake_llm):
    """API client wired to the test catalog, database and fake LLM."""
    from storefront.api import deps
    from storefront.main import app

    async def override_database():
        async with session_factory() as session:
            yield session

    registry = ImportRegistry()
    engine = LeadDiscoveryEngine(llm=fake_llm)

    app.dependency_overrides[deps.get_database] = override_database
    app.dependency_overrides[deps.get_catalog] = lambda: catalog
    app.dependency_overrides[deps.get_import_registry] = lambda: registry
    app.dependency_overrides[deps.get_assistant] = lambda: assistant
    app.dependency_overrides[deps.get_lead_engine] = lambda: engine

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()
