"""JSON-file backed financial dataset.

The dataset is read once into memory and treated as read-only afterwards, so a
single loaded instance can be shared by concurrent requests.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

from pydantic import ValidationError

from core.exceptions import DatasetError
from schemas.metrics import Dataset, DateRange, Metric, Product


logger = logging.getLogger(__name__)


class JsonDataset:
    """Products and monthly metrics loaded from a JSON document."""

    def __init__(self, data_path: str | Path) -> None:
        self._data_path = Path(data_path)
        self._dataset: Dataset | None = None

    @classmethod
    def from_dataset(cls, dataset: Dataset) -> "JsonDataset":
        """Build an already-loaded instance (used by tests and tooling)."""
        instance = cls("<memory>")
        instance._dataset = dataset
        return instance

    def load(self) -> None:
        try:
            raw = self._data_path.read_text(encoding="utf-8")
            self._dataset = Dataset.model_validate(json.loads(raw))
        except (OSError, json.JSONDecodeError, ValidationError) as exc:
            self._dataset = None
            raise DatasetError(
                f"Failed to load dataset from {self._data_path}: {exc}"
            ) from exc
        logger.info(
            "Dataset loaded: %d metrics, %d products",
            len(self._dataset.metrics),
            len(self._dataset.products),
        )

    @property
    def is_loaded(self) -> bool:
        return self._dataset is not None

    def _require(self) -> Dataset:
        if self._dataset is None:
            raise DatasetError("Dataset not loaded")
        return self._dataset

    def products(self) -> list[Product]:
        return list(self._require().products)

    def product_by_id(self, product_id: str) -> Product | None:
        return next((p for p in self._require().products if p.id == product_id), None)

    def metrics(self) -> list[Metric]:
        return list(self._require().metrics)

    def find_metrics(
        self,
        start_date: str | None = None,
        end_date: str | None = None,
        product_ids: list[str] | None = None,
    ) -> list[Metric]:
        """Filter metrics by inclusive ISO date bounds and product ids."""
        metrics = self.metrics()
        if start_date:
            metrics = [m for m in metrics if m.date >= start_date]
        if end_date:
            metrics = [m for m in metrics if m.date <= end_date]
        if product_ids:
            wanted = set(product_ids)
            metrics = [m for m in metrics if m.productId in wanted]
        return metrics

    def date_range(self) -> DateRange:
        months = sorted({m.date for m in self._require().metrics})
        return DateRange(
            minDate=months[0] if months else "",
            maxDate=months[-1] if months else "",
            months=months,
        )
