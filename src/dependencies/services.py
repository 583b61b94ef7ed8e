"""Service providers for FastAPI dependency injection.

The dataset is process-wide and read-only once loaded, so it is built once
and shared. Tests swap any provider via `app.dependency_overrides`.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Annotated

from fastapi import Depends

from core.config import get_settings
from services.ai.gateway import CompletionGatewayProtocol, create_completion_gateway
from services.cfo_agent import CFOAssistantService, ToolExecutor
from services.dataset import JsonDataset
from services.metrics import MetricsService
from services.products import ProductService


@lru_cache
def get_dataset() -> JsonDataset:
    """Load the configured dataset on first use."""
    dataset = JsonDataset(get_settings().DATASET_PATH)
    dataset.load()
    return dataset


def get_metrics_service(
    dataset: Annotated[JsonDataset, Depends(get_dataset)],
) -> MetricsService:
    return MetricsService(dataset)


def get_product_service(
    dataset: Annotated[JsonDataset, Depends(get_dataset)],
) -> ProductService:
    return ProductService(dataset)


@lru_cache
def get_completion_gateway() -> CompletionGatewayProtocol:
    """Build the OpenAI gateway; raises MissingCredentialError without a key."""
    return create_completion_gateway(get_settings())


def get_assistant_service(
    gateway: Annotated[CompletionGatewayProtocol, Depends(get_completion_gateway)],
    metrics_service: Annotated[MetricsService, Depends(get_metrics_service)],
    product_service: Annotated[ProductService, Depends(get_product_service)],
) -> CFOAssistantService:
    return CFOAssistantService(
        gateway,
        ToolExecutor(metrics_service, product_service),
        max_iterations=get_settings().AI_MAX_ITERATIONS,
    )


MetricsServiceDep = Annotated[MetricsService, Depends(get_metrics_service)]
ProductServiceDep = Annotated[ProductService, Depends(get_product_service)]
AssistantServiceDep = Annotated[CFOAssistantService, Depends(get_assistant_service)]
