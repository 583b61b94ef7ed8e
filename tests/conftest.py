"""Shared test fixtures for pytest.

Env defaults are set before importing the app so settings resolve to the test
environment (no .env file) and the bundled sample dataset.
"""

import os
from collections.abc import AsyncGenerator, Generator
from pathlib import Path

import pytest
import pytest_asyncio
from fastapi.testclient import TestClient
from httpx import ASGITransport, AsyncClient


os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault(
    "DATASET_PATH", str(Path(__file__).resolve().parents[1] / "data" / "dataset.json")
)

from dependencies.services import get_completion_gateway, get_dataset
from fixtures.cfo_fakes import (
    RecordingExecutor,
    ScriptedGateway,
    build_sample_dataset,
)
from main import app
from services.cfo_agent.tools import ToolExecutor
from services.dataset import JsonDataset
from services.metrics import MetricsService
from services.products import ProductService


@pytest.fixture
def sample_dataset() -> JsonDataset:
    return JsonDataset.from_dataset(build_sample_dataset())


@pytest.fixture
def metrics_service(sample_dataset: JsonDataset) -> MetricsService:
    return MetricsService(sample_dataset)


@pytest.fixture
def product_service(sample_dataset: JsonDataset) -> ProductService:
    return ProductService(sample_dataset)


@pytest.fixture
def tool_executor(
    metrics_service: MetricsService, product_service: ProductService
) -> ToolExecutor:
    return ToolExecutor(metrics_service, product_service)


@pytest.fixture
def recording_executor() -> RecordingExecutor:
    return RecordingExecutor()


@pytest.fixture
def scripted_gateway() -> ScriptedGateway:
    """Gateway whose script individual tests fill in."""
    return ScriptedGateway()


@pytest.fixture
def override_services(
    sample_dataset: JsonDataset, scripted_gateway: ScriptedGateway
) -> Generator[ScriptedGateway, None, None]:
    """Point the app at the sample dataset and the scripted gateway."""
    app.dependency_overrides[get_dataset] = lambda: sample_dataset
    app.dependency_overrides[get_completion_gateway] = lambda: scripted_gateway
    yield scripted_gateway
    app.dependency_overrides.pop(get_dataset, None)
    app.dependency_overrides.pop(get_completion_gateway, None)


@pytest.fixture
def client() -> Generator[TestClient, None, None]:
    """
    Create a test client for the FastAPI application.
    """
    with TestClient(app) as client:
        yield client


@pytest_asyncio.fixture
async def async_client(
    override_services: ScriptedGateway,
) -> AsyncGenerator[AsyncClient, None]:
    """Async client wired to the sample dataset and scripted gateway."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as client:
        yield client
