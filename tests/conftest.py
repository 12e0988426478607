from __future__ import annotations

import os
from collections.abc import Callable

import httpx
import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

# Ensure environment variables are set before application settings are imported.
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("VERIFICATION_SERVICE_URL", "http://test/api")
os.environ.setdefault("VERIFICATION_SERVICE_TIMEOUT", "5")
os.environ.setdefault("LOG_FORMAT", "text")

from docverify.api import dependencies as dependencies_module
from docverify.main import create_app
from docverify.services.hashing_service import HashingService
from docverify.services.ledger_service import LedgerService
from docverify.services.metadata_store import MetadataStore
from docverify.services.registry_service import RegistryService

BASE_URL = "http://test/api"


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture
def hashing_service() -> HashingService:
    return HashingService()


@pytest.fixture
def ledger_service() -> LedgerService:
    return LedgerService(owner_address="0x" + "1" * 40, genesis_block=100)


@pytest.fixture
def metadata_store() -> MetadataStore:
    return MetadataStore()


@pytest.fixture
def registry_service(ledger_service: LedgerService, metadata_store: MetadataStore) -> RegistryService:
    return RegistryService(ledger_service=ledger_service, metadata_store=metadata_store)


@pytest.fixture
def backend_app(registry_service: RegistryService) -> FastAPI:
    """Reference backend with a fresh in-memory ledger per test."""
    app = create_app()
    dependencies_module.get_registry_service.cache_clear()
    app.dependency_overrides[dependencies_module.get_registry_service] = lambda: registry_service
    return app


@pytest.fixture
def backend_client_factory(backend_app: FastAPI) -> Callable[[], AsyncClient]:
    def _factory() -> AsyncClient:
        return AsyncClient(transport=ASGITransport(app=backend_app), base_url="http://test")

    return _factory


@pytest.fixture
def mock_http_factory() -> Callable[[Callable[[httpx.Request], httpx.Response]], httpx.AsyncClient]:
    """Builds an AsyncClient whose requests are answered by ``handler``."""

    def _factory(handler: Callable[[httpx.Request], httpx.Response]) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(handler))

    return _factory
