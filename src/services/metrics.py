"""Metric aggregation over the financial dataset."""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Callable, Iterable
from datetime import date, timedelta

from schemas.metrics import (
    AggregatedMetric,
    Comparison,
    Metric,
    MetricsGroupBy,
    MetricsQuery,
    MetricsResponse,
    MetricsSummary,
)
from services.dataset import JsonDataset


def _sum(items: Iterable[Metric], value: Callable[[Metric], float]) -> float:
    return sum(value(m) for m in items)


def _average(items: list[Metric], value: Callable[[Metric], float]) -> float:
    if not items:
        return 0.0
    return _sum(items, value) / len(items)


def _margin(revenue: float, profit: float) -> float:
    return (profit / revenue) * 100 if revenue > 0 else 0.0


def format_month_label(iso_date: str) -> str:
    """'2024-03-01' -> 'Mar 2024'."""
    return date.fromisoformat(iso_date).strftime("%b %Y")


def comparison_window(
    start_date: str, end_date: str, comparison: Comparison
) -> tuple[str, str]:
    """Return the window to compare against.

    `previous` is the equally long window ending the day before `start_date`;
    `yoy` is the same window one year earlier.
    """
    start = date.fromisoformat(start_date)
    end = date.fromisoformat(end_date)
    if comparison == "previous":
        prev_end = start - timedelta(days=1)
        prev_start = prev_end - (end - start)
        return prev_start.isoformat(), prev_end.isoformat()

    def _year_earlier(d: date) -> date:
        try:
            return d.replace(year=d.year - 1)
        except ValueError:  # Feb 29
            return d.replace(year=d.year - 1, day=28)

    return _year_earlier(start).isoformat(), _year_earlier(end).isoformat()


class MetricsService:
    """Aggregates monthly product metrics by month, product, or both."""

    def __init__(self, dataset: JsonDataset) -> None:
        self._dataset = dataset

    async def get_aggregated_metrics(self, query: MetricsQuery) -> MetricsResponse:
        metrics = self._dataset.find_metrics(
            query.startDate, query.endDate, query.productIds
        )
        data = self._aggregate(metrics, query.groupBy)

        comparison_data: list[AggregatedMetric] | None = None
        if query.comparison != "none" and query.startDate and query.endDate:
            comp_start, comp_end = comparison_window(
                query.startDate, query.endDate, query.comparison
            )
            comp_metrics = self._dataset.find_metrics(
                comp_start, comp_end, query.productIds
            )
            comparison_data = self._aggregate(comp_metrics, query.groupBy)

        return MetricsResponse(
            data=data,
            comparison=comparison_data,
            summary=self._summarize(data),
        )

    def _aggregate(
        self, metrics: list[Metric], group_by: MetricsGroupBy
    ) -> list[AggregatedMetric]:
        if group_by == "product":
            return self._by_product(metrics)
        if group_by == "month-product":
            return self._by_month_product(metrics)
        return self._by_month(metrics)

    def _by_month(self, metrics: list[Metric]) -> list[AggregatedMetric]:
        grouped: dict[str, list[Metric]] = defaultdict(list)
        for m in metrics:
            grouped[m.date].append(m)
        return [
            self._aggregate_group(
                items, label=format_month_label(month), date=month
            )
            for month, items in sorted(grouped.items())
        ]

    def _by_product(self, metrics: list[Metric]) -> list[AggregatedMetric]:
        grouped: dict[str, list[Metric]] = defaultdict(list)
        for m in metrics:
            grouped[m.productId].append(m)

        out: list[AggregatedMetric] = []
        for product_id, items in grouped.items():
            base = self._aggregate_group(
                items,
                label=items[0].productName,
                product_id=product_id,
                product_name=items[0].productName,
            )
            avg_cac = _average(items, lambda m: m.cac)
            avg_ltv = _average(items, lambda m: m.ltv)
            avg_mau = _average(items, lambda m: m.mau)
            out.append(
                base.model_copy(
                    update={
                        "cac": round(avg_cac),
                        "ltv": round(avg_ltv),
                        "ltvCacRatio": avg_ltv / avg_cac if avg_cac > 0 else 0.0,
                        "mau": round(avg_mau),
                    }
                )
            )
        return out

    def _by_month_product(self, metrics: list[Metric]) -> list[AggregatedMetric]:
        grouped: dict[tuple[str, str], list[Metric]] = defaultdict(list)
        for m in metrics:
            grouped[(m.date, m.productId)].append(m)
        return [
            self._aggregate_group(
                items,
                label=format_month_label(month),
                date=month,
                product_id=product_id,
                product_name=items[0].productName,
            )
            for (month, product_id), items in sorted(grouped.items())
        ]

    @staticmethod
    def _aggregate_group(
        items: list[Metric],
        *,
        label: str,
        date: str | None = None,
        product_id: str | None = None,
        product_name: str | None = None,
    ) -> AggregatedMetric:
        revenue = _sum(items, lambda m: m.totalRevenue)
        gross_profit = _sum(items, lambda m: m.grossProfit)
        return AggregatedMetric(
            label=label,
            date=date,
            productId=product_id,
            productName=product_name,
            totalRevenue=revenue,
            totalExpenses=_sum(items, lambda m: m.totalExpenses),
            grossProfit=gross_profit,
            grossMargin=_margin(revenue, gross_profit),
            operatingCashFlow=_sum(items, lambda m: m.operatingCashFlow),
            netProfit=_sum(items, lambda m: m.netProfit),
        )

    @staticmethod
    def _summarize(data: list[AggregatedMetric]) -> MetricsSummary:
        revenue = sum(m.totalRevenue for m in data)
        gross_profit = sum(m.grossProfit for m in data)
        return MetricsSummary(
            totalRevenue=revenue,
            totalExpenses=sum(m.totalExpenses for m in data),
            grossProfit=gross_profit,
            grossMargin=_margin(revenue, gross_profit),
            operatingCashFlow=sum(m.operatingCashFlow for m in data),
        )
