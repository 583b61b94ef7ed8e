"""Tests for the JSON dataset, metric aggregation and product lookups."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from core.exceptions import DatasetError, ProductNotFoundError
from schemas.metrics import MetricsQuery
from services.dataset import JsonDataset
from services.metrics import MetricsService, comparison_window, format_month_label
from services.products import ProductService


REPO_DATASET = Path(__file__).resolve().parents[2] / "data" / "dataset.json"


def test_bundled_dataset_loads():
    dataset = JsonDataset(REPO_DATASET)
    dataset.load()

    assert dataset.is_loaded
    assert {p.id for p in dataset.products()} == {
        "enterprise",
        "professional",
        "starter",
        "consulting",
    }
    assert dataset.date_range().minDate == "2023-01-01"


def test_missing_file_raises_dataset_error(tmp_path: Path):
    dataset = JsonDataset(tmp_path / "nope.json")

    with pytest.raises(DatasetError):
        dataset.load()
    assert not dataset.is_loaded


def test_invalid_document_raises_dataset_error(tmp_path: Path):
    path = tmp_path / "bad.json"
    path.write_text(json.dumps({"products": "not-a-list"}), encoding="utf-8")

    with pytest.raises(DatasetError):
        JsonDataset(path).load()


def test_unloaded_dataset_raises_on_access(tmp_path: Path):
    with pytest.raises(DatasetError):
        JsonDataset(tmp_path / "x.json").products()


def test_find_metrics_filters_inclusively(sample_dataset: JsonDataset):
    rows = sample_dataset.find_metrics("2024-02-01", "2024-03-01", ["beta"])

    assert [(m.date, m.productId) for m in rows] == [
        ("2024-02-01", "beta"),
        ("2024-03-01", "beta"),
    ]


def test_format_month_label():
    assert format_month_label("2024-03-01") == "Mar 2024"


def test_comparison_windows():
    assert comparison_window("2024-04-01", "2024-06-30", "yoy") == (
        "2023-04-01",
        "2023-06-30",
    )
    assert comparison_window("2024-04-01", "2024-04-30", "previous") == (
        "2024-03-02",
        "2024-03-31",
    )


@pytest.mark.asyncio
async def test_group_by_month_sums_products(metrics_service: MetricsService):
    result = await metrics_service.get_aggregated_metrics(MetricsQuery(groupBy="month"))

    assert [m.label for m in result.data] == ["Jan 2024", "Feb 2024", "Mar 2024"]
    jan = result.data[0]
    assert jan.totalRevenue == 1500
    assert jan.totalExpenses == 1000
    assert jan.grossProfit == 500
    assert jan.grossMargin == pytest.approx(500 / 1500 * 100)
    assert result.comparison is None
    assert result.summary.totalRevenue == 5400


@pytest.mark.asyncio
async def test_group_by_product_averages_unit_economics(metrics_service: MetricsService):
    result = await metrics_service.get_aggregated_metrics(MetricsQuery(groupBy="product"))

    alpha = next(m for m in result.data if m.productId == "alpha")
    assert alpha.label == "Alpha Plan"
    assert alpha.totalRevenue == 3600
    assert alpha.cac == 110
    assert alpha.ltv == 1000
    assert alpha.ltvCacRatio == pytest.approx(1000 / 110)
    assert alpha.mau == 60


@pytest.mark.asyncio
async def test_group_by_month_product(metrics_service: MetricsService):
    result = await metrics_service.get_aggregated_metrics(
        MetricsQuery(groupBy="month-product", startDate="2024-01-01", endDate="2024-01-31")
    )

    assert [(m.date, m.productId) for m in result.data] == [
        ("2024-01-01", "alpha"),
        ("2024-01-01", "beta"),
    ]


@pytest.mark.asyncio
async def test_previous_period_comparison(metrics_service: MetricsService):
    result = await metrics_service.get_aggregated_metrics(
        MetricsQuery(startDate="2024-03-01", endDate="2024-03-31", comparison="previous")
    )

    assert [m.label for m in result.data] == ["Mar 2024"]
    assert result.comparison is not None
    assert [m.label for m in result.comparison] == ["Feb 2024"]


@pytest.mark.asyncio
async def test_product_lookups(product_service: ProductService):
    assert (await product_service.get_product_by_id("beta")).name == "Beta Services"
    assert len(await product_service.get_all_products()) == 2

    date_range = await product_service.get_date_range()
    assert date_range.months == ["2024-01-01", "2024-02-01", "2024-03-01"]

    with pytest.raises(ProductNotFoundError):
        await product_service.get_product_by_id("gamma")
