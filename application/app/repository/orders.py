from datetime import datetime
from typing import List, Optional, Tuple

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.exceptions import InternalError
from app.models.orders import Order, OrderItem
from app.logging.utils import get_app_logger

logger = get_app_logger("app.repository.orders")

SORT_COLUMNS = {
    "created_at": Order.created_at,
    "total": Order.total,
}


class OrdersRepository:
    def __init__(self, db: Session):
        self.db = db

    def create_transactional(self, order: Order, items: List[OrderItem]) -> Order:
        """Stage the order with all of its lines; the caller's transaction commits or rolls back all of them."""
        try:
            order.items = list(items)
            self.db.add(order)
            self.db.flush()
            return order
        except SQLAlchemyError as e:
            logger.error(f"order_create_error | customer_id={order.customer_id} items={len(items)} error={e}", exc_info=True)
            raise InternalError("Failed to create order") from e

    def get_by_id(self, order_id: str) -> Optional[Order]:
        return self.db.get(Order, order_id)

    def find_by_customer_id(self, customer_id: str) -> List[Order]:
        query = select(Order).where(Order.customer_id == customer_id).order_by(Order.created_at.desc())
        return list(self.db.execute(query).scalars().all())

    def find_all(
        self,
        page: int = 1,
        page_size: int = 10,
        status: Optional[str] = None,
        sort_by: str = "created_at",
        sort_order: str = "desc",
    ) -> Tuple[List[Order], int]:
        try:
            count_query = select(func.count(Order.id))
            query = select(Order)
            if status:
                count_query = count_query.where(Order.status == status)
                query = query.where(Order.status == status)

            column = SORT_COLUMNS.get(sort_by, Order.created_at)
            query = query.order_by(column.asc() if sort_order == "asc" else column.desc(), Order.id)
            query = query.limit(page_size).offset((page - 1) * page_size)

            total_count = self.db.execute(count_query).scalar_one()
            return list(self.db.execute(query).scalars().all()), total_count
        except SQLAlchemyError as e:
            logger.error(f"orders_fetch_error | page={page} size={page_size} status={status} error={e}", exc_info=True)
            raise InternalError("Failed to load orders") from e

    def summarize(self, since: Optional[datetime] = None) -> Tuple[int, object]:
        """Order count and revenue, optionally only for orders created at or after `since`."""
        query = select(func.count(Order.id), func.coalesce(func.sum(Order.total), 0))
        if since is not None:
            query = query.where(Order.created_at >= since)
        count, revenue = self.db.execute(query).one()
        return count, revenue
