from typing import List, Literal, Optional

from fastapi import APIRouter, Depends, Query

from app.core.constants import OrderStatus
from app.dto.orders import OrderCreate, OrderListResponse, OrderResponse, OrderStats, OrderStatusUpdate
from app.routes.dependencies import get_order_service
from app.services.order_service import OrderService

api_router = APIRouter(prefix="/orders", tags=["orders"])


@api_router.post("", response_model=OrderResponse, status_code=201)
async def create_order(order: OrderCreate, service: OrderService = Depends(get_order_service)):
    """Create an order; either every line is stored with its discount breakdown or nothing is."""
    return await service.create_order(order)


@api_router.get("", response_model=OrderListResponse)
async def list_orders(
    page: int = Query(1, description="Page number (starting from 1)"),
    page_size: int = Query(10, description="Number of orders per page"),
    status: Optional[OrderStatus] = Query(None, description="Filter by status"),
    sort_by: Literal["created_at", "total"] = Query("created_at"),
    sort_order: Literal["asc", "desc"] = Query("desc"),
    service: OrderService = Depends(get_order_service),
):
    return await service.list_orders(page, page_size, status, sort_by, sort_order)


@api_router.get("/stats", response_model=OrderStats)
async def get_order_stats(service: OrderService = Depends(get_order_service)):
    return await service.get_stats()


@api_router.get("/customer/{customer_id}", response_model=List[OrderResponse])
async def get_customer_orders(customer_id: str, service: OrderService = Depends(get_order_service)):
    return await service.get_customer_orders(customer_id)


@api_router.get("/{order_id}", response_model=OrderResponse)
async def get_order(order_id: str, service: OrderService = Depends(get_order_service)):
    return await service.get_order(order_id)


@api_router.patch("/{order_id}/status", response_model=OrderResponse)
async def update_order_status(order_id: str, body: OrderStatusUpdate, service: OrderService = Depends(get_order_service)):
    return await service.update_order_status(order_id, body.status)
