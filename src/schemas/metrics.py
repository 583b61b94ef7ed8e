"""Schemas for the financial dataset, aggregated metrics and products."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class Product(BaseModel):
    id: str
    name: str
    category: str
    launchDate: str | None = None


class CategoryBreakdown(BaseModel):
    """Revenue or expense amounts split by category (all optional)."""

    subscription_revenue: float | None = None
    setup_fees: float | None = None
    professional_services: float | None = None
    overage_fees: float | None = None
    salaries: float | None = None
    marketing: float | None = None
    infrastructure: float | None = None
    software: float | None = None
    operations: float | None = None


class Metric(BaseModel):
    """One product's figures for one month (`date` is the month's ISO date)."""

    date: str
    productId: str
    productName: str
    revenueByCategory: CategoryBreakdown = Field(default_factory=CategoryBreakdown)
    totalRevenue: float
    expensesByCategory: CategoryBreakdown = Field(default_factory=CategoryBreakdown)
    totalExpenses: float
    grossProfit: float
    grossMargin: float
    operatingCashFlow: float = 0.0
    netProfit: float = 0.0
    cac: float = 0.0
    ltv: float = 0.0
    ltvCacRatio: float = 0.0
    mau: float = 0.0


class Dataset(BaseModel):
    products: list[Product]
    revenueCategories: list[str] = Field(default_factory=list)
    expenseCategories: list[str] = Field(default_factory=list)
    metrics: list[Metric]


MetricsGroupBy = Literal["month", "product", "month-product"]
Comparison = Literal["none", "previous", "yoy"]


class MetricsQuery(BaseModel):
    startDate: str | None = None
    endDate: str | None = None
    productIds: list[str] | None = None
    groupBy: MetricsGroupBy = "month"
    comparison: Comparison = "none"


class AggregatedMetric(BaseModel):
    label: str
    date: str | None = None
    productId: str | None = None
    productName: str | None = None
    totalRevenue: float
    totalExpenses: float
    grossProfit: float
    grossMargin: float
    operatingCashFlow: float
    netProfit: float
    cac: float | None = None
    ltv: float | None = None
    ltvCacRatio: float | None = None
    mau: float | None = None


class MetricsSummary(BaseModel):
    totalRevenue: float
    totalExpenses: float
    grossProfit: float
    grossMargin: float
    operatingCashFlow: float


class MetricsResponse(BaseModel):
    data: list[AggregatedMetric]
    comparison: list[AggregatedMetric] | None = None
    summary: MetricsSummary

    model_config = ConfigDict(extra="forbid")


class DateRange(BaseModel):
    minDate: str
    maxDate: str
    months: list[str]
