"""Product catalogue lookups."""

from __future__ import annotations

from core.exceptions import ProductNotFoundError
from schemas.metrics import DateRange, Product
from services.dataset import JsonDataset


class ProductService:
    def __init__(self, dataset: JsonDataset) -> None:
        self._dataset = dataset

    async def get_all_products(self) -> list[Product]:
        return self._dataset.products()

    async def get_product_by_id(self, product_id: str) -> Product:
        product = self._dataset.product_by_id(product_id)
        if product is None:
            raise ProductNotFoundError(f"Product '{product_id}' not found")
        return product

    async def get_date_range(self) -> DateRange:
        """Earliest and latest month present in the metrics, plus every month."""
        return self._dataset.date_range()
