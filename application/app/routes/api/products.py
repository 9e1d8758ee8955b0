from typing import List

from fastapi import APIRouter, Depends, Query, status

from app.dto.products import ProductCreate, ProductResponse, ProductToggle, ProductUpdate
from app.routes.dependencies import get_product_service
from app.services.product_service import ProductService

api_router = APIRouter(prefix="/products", tags=["products"])


@api_router.post("", response_model=ProductResponse, status_code=status.HTTP_201_CREATED)
async def create_product(product: ProductCreate, service: ProductService = Depends(get_product_service)):
    return await service.create_product(product)


@api_router.get("", response_model=List[ProductResponse])
async def list_products(
    include_inactive: bool = Query(False, description="Include disabled products"),
    service: ProductService = Depends(get_product_service),
):
    return await service.list_products(include_inactive)


@api_router.get("/{product_id}", response_model=ProductResponse)
async def get_product(product_id: str, service: ProductService = Depends(get_product_service)):
    return await service.get_product(product_id)


@api_router.put("/{product_id}", response_model=ProductResponse)
async def update_product(product_id: str, product: ProductUpdate, service: ProductService = Depends(get_product_service)):
    return await service.update_product(product_id, product)


@api_router.patch("/{product_id}/toggle", response_model=ProductResponse)
async def toggle_product(product_id: str, body: ProductToggle, service: ProductService = Depends(get_product_service)):
    return await service.toggle_product(product_id, body.is_active)


@api_router.delete("/{product_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_product(product_id: str, service: ProductService = Depends(get_product_service)):
    await service.delete_product(product_id)
