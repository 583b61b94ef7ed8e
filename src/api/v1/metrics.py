from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, HTTPException, Query, status

from dependencies.services import MetricsServiceDep
from schemas.metrics import Comparison, MetricsGroupBy, MetricsQuery, MetricsResponse


router = APIRouter(prefix="/metrics", tags=["metrics"])


@router.get("", response_model=MetricsResponse)
async def get_metrics(
    metrics_service: MetricsServiceDep,
    startDate: Annotated[str | None, Query()] = None,  # noqa: N803
    endDate: Annotated[str | None, Query()] = None,  # noqa: N803
    productIds: Annotated[  # noqa: N803
        str | None, Query(description="Comma-separated product ids")
    ] = None,
    groupBy: Annotated[MetricsGroupBy, Query()] = "month",  # noqa: N803
    comparison: Annotated[Comparison, Query()] = "none",
) -> MetricsResponse:
    """Aggregated metrics for a date window, optionally with a comparison window."""
    if startDate and endDate and startDate > endDate:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Start date must be before end date",
        )

    product_ids = (
        [pid.strip() for pid in productIds.split(",") if pid.strip()]
        if productIds
        else None
    )
    return await metrics_service.get_aggregated_metrics(
        MetricsQuery(
            startDate=startDate,
            endDate=endDate,
            productIds=product_ids,
            groupBy=groupBy,
            comparison=comparison,
        )
    )
