"""Executor for the assistant's data-query tools.

Every tool returns a flat JSON-serializable dict with a `success` flag. Tool
failures never raise: they come back as `{"success": False, "error": ...}` so
the model can read the failure on its next turn.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from typing import Any

from pydantic import BaseModel, ConfigDict, ValidationError

from schemas.chat import GroupBy, MetricName
from schemas.metrics import MetricsQuery
from services.interfaces import MetricsServiceProtocol, ProductServiceProtocol


logger = logging.getLogger(__name__)

ToolResult = dict[str, Any]

# Which aggregated field carries each metric.
METRIC_FIELD_MAP: dict[str, str] = {
    "revenue": "totalRevenue",
    "expenses": "totalExpenses",
    "profit": "grossProfit",
    "margin": "grossMargin",
    "cac": "cac",
    "ltv": "ltv",
}


class QueryMetricsParams(BaseModel):
    """Arguments accepted by `query_metrics`."""

    groupBy: GroupBy
    metric: MetricName
    startDate: str | None = None
    endDate: str | None = None
    productIds: list[str] | None = None

    model_config = ConfigDict(extra="ignore")


def _failure(error: str) -> ToolResult:
    return {"success": False, "error": error}


class ToolExecutor:
    """Dispatches tool calls by name against the domain services."""

    def __init__(
        self,
        metrics_service: MetricsServiceProtocol,
        product_service: ProductServiceProtocol,
    ) -> None:
        self._metrics_service = metrics_service
        self._product_service = product_service
        self._handlers: dict[str, Callable[[dict[str, Any]], Awaitable[ToolResult]]] = {
            "query_metrics": self._query_metrics,
            "get_products": self._get_products,
            "get_date_range": self._get_date_range,
        }

    async def execute(self, name: str, args: dict[str, Any]) -> ToolResult:
        handler = self._handlers.get(name)
        if handler is None:
            logger.warning("Model requested unknown tool: %s", name)
            return _failure(f"Unknown tool: {name}")
        try:
            return await handler(args)
        except Exception as exc:  # noqa: BLE001
            logger.exception("Tool %s failed", name)
            return _failure(f"{name} failed: {exc}")

    async def _query_metrics(self, args: dict[str, Any]) -> ToolResult:
        try:
            params = QueryMetricsParams.model_validate(args)
        except ValidationError as exc:
            logger.warning(
                "Invalid query_metrics arguments: %d error(s)", exc.error_count()
            )
            return _failure(f"Invalid arguments for query_metrics: {exc.errors()}")

        result = await self._metrics_service.get_aggregated_metrics(
            MetricsQuery(
                startDate=params.startDate,
                endDate=params.endDate,
                productIds=params.productIds,
                groupBy=params.groupBy,
                comparison="none",
            )
        )

        field = METRIC_FIELD_MAP[params.metric]
        rows = [
            {
                "label": item.label,
                "value": getattr(item, field),
                "productId": item.productId,
                "productName": item.productName,
                "date": item.date,
            }
            for item in result.data
        ]
        total = sum(float(row["value"] or 0) for row in rows)
        return {
            "success": True,
            "metric": params.metric,
            "groupBy": params.groupBy,
            "data": rows,
            "summary": {
                "total": total,
                "count": len(rows),
                "average": total / len(rows) if rows else 0,
            },
        }

    async def _get_products(self, args: dict[str, Any]) -> ToolResult:
        products = await self._product_service.get_all_products()
        return {
            "success": True,
            "products": [
                {"id": p.id, "name": p.name, "category": p.category} for p in products
            ],
        }

    async def _get_date_range(self, args: dict[str, Any]) -> ToolResult:
        date_range = await self._product_service.get_date_range()
        return {
            "success": True,
            "minDate": date_range.minDate,
            "maxDate": date_range.maxDate,
            "totalMonths": len(date_range.months),
        }
