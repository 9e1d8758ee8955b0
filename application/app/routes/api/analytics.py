from fastapi import APIRouter, Depends

from app.routes.dependencies import get_analytics_service
from app.services.analytics_service import AnalyticsService

api_router = APIRouter(prefix="/analytics", tags=["analytics"])


@api_router.get("/dashboard")
async def get_dashboard_stats(service: AnalyticsService = Depends(get_analytics_service)):
    return await service.get_dashboard_stats()
