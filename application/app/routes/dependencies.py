"""
Service providers for route handlers; tests override these to inject sessions and clocks.
"""
from app.services.analytics_service import AnalyticsService
from app.services.order_service import OrderService
from app.services.product_service import ProductService
from app.services.promotion_service import PromotionService


def get_order_service() -> OrderService:
    return OrderService()


def get_product_service() -> ProductService:
    return ProductService()


def get_promotion_service() -> PromotionService:
    return PromotionService()


def get_analytics_service() -> AnalyticsService:
    return AnalyticsService()
