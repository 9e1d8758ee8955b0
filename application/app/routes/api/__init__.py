from fastapi import APIRouter
from app.routes.api.products import api_router as products_router
from app.routes.api.promotions import api_router as promotions_router
from app.routes.api.orders import api_router as orders_router
from app.routes.api.analytics import api_router as analytics_router

api_router = APIRouter()
api_router.include_router(products_router)
api_router.include_router(promotions_router)
api_router.include_router(orders_router)
api_router.include_router(analytics_router)

__all__ = ["api_router"]
