"""Service interfaces consumed by the assistant's tool executor.

Protocols keep the executor decoupled from the JSON dataset so tests can
inject fakes without patching module globals.
"""

from __future__ import annotations

from typing import Protocol

from schemas.metrics import DateRange, MetricsQuery, MetricsResponse, Product


class MetricsServiceProtocol(Protocol):
    """Protocol for metric aggregation."""

    async def get_aggregated_metrics(self, query: MetricsQuery) -> MetricsResponse:
        """Aggregate metrics for the given filters and grouping."""
        ...


class ProductServiceProtocol(Protocol):
    """Protocol for product and date-range lookups."""

    async def get_all_products(self) -> list[Product]:
        """Return every product in the catalogue."""
        ...

    async def get_date_range(self) -> DateRange:
        """Return the span of months covered by the metrics."""
        ...
