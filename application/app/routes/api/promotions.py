from typing import List

from fastapi import APIRouter, Depends, status

from app.dto.promotions import (
    DiscountCalculateRequest,
    DiscountCalculateResponse,
    PromotionCreate,
    PromotionResponse,
    PromotionToggle,
    PromotionUpdate,
    SlabsReplace,
)
from app.routes.dependencies import get_promotion_service
from app.services.promotion_service import PromotionService

api_router = APIRouter(prefix="/promotions", tags=["promotions"])


@api_router.post("", response_model=PromotionResponse, status_code=status.HTTP_201_CREATED)
async def create_promotion(promotion: PromotionCreate, service: PromotionService = Depends(get_promotion_service)):
    return await service.create_promotion(promotion)


@api_router.get("", response_model=List[PromotionResponse])
async def list_promotions(service: PromotionService = Depends(get_promotion_service)):
    return await service.list_promotions()


@api_router.get("/active", response_model=List[PromotionResponse])
async def list_active_promotions(service: PromotionService = Depends(get_promotion_service)):
    return await service.list_active_promotions()


@api_router.get("/{promotion_id}", response_model=PromotionResponse)
async def get_promotion(promotion_id: str, service: PromotionService = Depends(get_promotion_service)):
    return await service.get_promotion(promotion_id)


@api_router.put("/{promotion_id}", response_model=PromotionResponse)
async def update_promotion(promotion_id: str, promotion: PromotionUpdate, service: PromotionService = Depends(get_promotion_service)):
    return await service.update_promotion(promotion_id, promotion)


@api_router.patch("/{promotion_id}/toggle", response_model=PromotionResponse)
async def toggle_promotion(promotion_id: str, body: PromotionToggle, service: PromotionService = Depends(get_promotion_service)):
    return await service.toggle_promotion(promotion_id, body.is_enabled)


@api_router.put("/{promotion_id}/slabs", response_model=PromotionResponse)
async def replace_slabs(promotion_id: str, body: SlabsReplace, service: PromotionService = Depends(get_promotion_service)):
    return await service.replace_slabs(promotion_id, body.slabs)


@api_router.post("/{promotion_id}/calculate", response_model=DiscountCalculateResponse)
async def calculate_discount(
    promotion_id: str,
    body: DiscountCalculateRequest,
    service: PromotionService = Depends(get_promotion_service),
):
    """Preview the discount one promotion gives a product; not-applied is a normal 200 result."""
    return await service.calculate_discount(promotion_id, body)
