from datetime import datetime
from typing import Callable, List, Optional

from sqlalchemy.orm import sessionmaker

from app.connections.database import get_db_session
from app.core.constants import OrderStatus
from app.core.exceptions import InvalidInputError, InvalidStatusTransitionError, NotFoundError
from app.core.orders_creation.pricing import LineRequest, PricedOrder, price_order
from app.dto.orders import OrderCreate, OrderListResponse, OrderResponse, OrderStats
from app.models.orders import Order, OrderItem
from app.promotions.snapshots import product_to_snapshot, promotion_to_snapshot
from app.repository.orders import OrdersRepository
from app.repository.products import ProductsRepository
from app.repository.promotions import PromotionsRepository
from app.utils.datetime_helpers import ensure_utc, get_utc_now, start_of_day
from app.utils.money import quantize_money
from app.validations.orders import OrderCreateValidator, missing_products_error, validate_page_size

# Request context
from app.middlewares.request_context import request_context

# Settings
from app.config.settings import OMSConfigs
configs = OMSConfigs()

# Logger
from app.logging.utils import get_app_logger
logger = get_app_logger("app.services.order_service")


def order_to_response(order: Order) -> OrderResponse:
    return OrderResponse.model_validate(order)


def build_order_records(order: OrderCreate, priced: PricedOrder, now: datetime) -> tuple[Order, List[OrderItem]]:
    customer = order.customer_info
    record = Order(
        customer_id=order.customer_id,
        customer_name=customer.name,
        customer_email=customer.email,
        customer_phone=customer.phone,
        customer_address=customer.address,
        promotion_id=priced.promotion_id,
        status=OrderStatus.PENDING.value,
        currency=configs.DEFAULT_CURRENCY,
        subtotal=priced.subtotal,
        discount=priced.discount,
        total=priced.grand_total,
        notes=order.notes,
        created_at=now,
        updated_at=now,
    )
    items = [
        OrderItem(
            product_id=line.product.id,
            product_name=line.product.name,
            product_sku=line.product.sku,
            unit_price=quantize_money(line.product.unit_price),
            quantity=line.quantity,
            discount=line.discount,
            total=line.total,
            applied_promotions=[applied.to_dict() for applied in line.applied_promotions],
            created_at=now,
            updated_at=now,
        )
        for line in priced.lines
    ]
    return record, items


class OrderService:
    """Order creation, lookup, status changes and stats"""

    def __init__(self, session_factory: Optional[sessionmaker] = None, clock: Callable[[], datetime] = get_utc_now):
        self.session_factory = session_factory
        self.clock = clock
        request_context.module_name = 'order_service'

    async def create_order(self, order: OrderCreate) -> OrderResponse:
        """Validate, price and persist an order in a single transaction.

        Raises:
            InvalidInputError: with every violation found in the request
        """
        errors = OrderCreateValidator(order).validate_all()
        if errors:
            raise InvalidInputError("Invalid order request", errors=errors)

        request_context.customer_id = order.customer_id
        now = ensure_utc(self.clock())
        logger.info(f"order_create_initiated | customer_id={order.customer_id} items={len(order.items)} promotion_id={order.promotion_id}")

        with get_db_session(self.session_factory) as db:
            product_ids = [item.product_id for item in order.items]
            products = {p.id: p for p in ProductsRepository(db).find_active_by_ids(product_ids)}
            missing = [product_id for product_id in product_ids if product_id not in products]
            if missing:
                logger.warning(f"order_products_missing | customer_id={order.customer_id} missing={missing}")
                raise InvalidInputError("Some products are unavailable", errors=[missing_products_error(missing)])

            promotions = [promotion_to_snapshot(p) for p in PromotionsRepository(db).find_active(now)]
            lines = [LineRequest(product_to_snapshot(products[item.product_id]), item.quantity) for item in order.items]
            priced = price_order(lines, promotions, order.promotion_id)

            record, items = build_order_records(order, priced, now)
            created = OrdersRepository(db).create_transactional(record, items)
            request_context.order_id = created.id
            response = order_to_response(created)

        logger.info(f"order_created | order_id={response.id} subtotal={priced.subtotal} discount={priced.discount} total={priced.grand_total}")
        return response

    async def get_order(self, order_id: str) -> OrderResponse:
        with get_db_session(self.session_factory, read_only=True) as db:
            order = OrdersRepository(db).get_by_id(order_id)
            if order is None:
                raise NotFoundError(f"Order {order_id} not found")
            return order_to_response(order)

    async def get_customer_orders(self, customer_id: str) -> List[OrderResponse]:
        with get_db_session(self.session_factory, read_only=True) as db:
            return [order_to_response(o) for o in OrdersRepository(db).find_by_customer_id(customer_id)]

    async def list_orders(
        self,
        page: int = 1,
        page_size: int = 10,
        status: Optional[OrderStatus] = None,
        sort_by: str = "created_at",
        sort_order: str = "desc",
    ) -> OrderListResponse:
        errors = validate_page_size(page, page_size)
        if errors:
            raise InvalidInputError("Invalid pagination parameters", errors=errors)

        with get_db_session(self.session_factory, read_only=True) as db:
            orders, total_count = OrdersRepository(db).find_all(
                page, page_size, status.value if status else None, sort_by, sort_order
            )
            return OrderListResponse(
                orders=[order_to_response(o) for o in orders],
                page=page,
                page_size=page_size,
                total_count=total_count,
                total_pages=(total_count + page_size - 1) // page_size,
            )

    async def update_order_status(self, order_id: str, status: OrderStatus) -> OrderResponse:
        with get_db_session(self.session_factory) as db:
            order = OrdersRepository(db).get_by_id(order_id)
            if order is None:
                raise NotFoundError(f"Order {order_id} not found")

            current = OrderStatus(order.status)
            if not current.can_transition_to(status):
                raise InvalidStatusTransitionError(
                    f"Cannot move order from {current.value} to {status.value}",
                    errors=[{
                        "code": InvalidStatusTransitionError.error_code,
                        "field": "status",
                        "message": f"Allowed: {sorted(s.value for s in current.allowed_transitions())}",
                    }],
                )

            order.status = status.value
            order.updated_at = ensure_utc(self.clock())
            db.flush()
            logger.info(f"order_status_updated | order_id={order_id} from={current.value} to={status.value}")
            return order_to_response(order)

    async def get_stats(self) -> OrderStats:
        today = start_of_day(self.clock())
        with get_db_session(self.session_factory, read_only=True) as db:
            repository = OrdersRepository(db)
            total_orders, total_revenue = repository.summarize()
            todays_orders, todays_revenue = repository.summarize(since=today)

        total_revenue = quantize_money(total_revenue)
        average = quantize_money(total_revenue / total_orders) if total_orders else quantize_money(0)
        return OrderStats(
            total_orders=total_orders,
            total_revenue=float(total_revenue),
            average_order_value=float(average),
            todays_orders=todays_orders,
            todays_revenue=float(quantize_money(todays_revenue)),
        )
