from __future__ import annotations

from fastapi import APIRouter

from dependencies.services import ProductServiceDep
from schemas.metrics import DateRange, Product


router = APIRouter(prefix="/products", tags=["products"])


@router.get("", response_model=list[Product])
async def list_products(product_service: ProductServiceDep) -> list[Product]:
    return await product_service.get_all_products()


# Declared before /{product_id} so "date-range" is not captured as an id.
@router.get("/date-range", response_model=DateRange)
async def get_date_range(product_service: ProductServiceDep) -> DateRange:
    return await product_service.get_date_range()


@router.get("/{product_id}", response_model=Product)
async def get_product(product_id: str, product_service: ProductServiceDep) -> Product:
    """Single product; unknown ids surface as 404 via the global error handler."""
    return await product_service.get_product_by_id(product_id)
