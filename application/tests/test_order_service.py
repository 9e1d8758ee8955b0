from decimal import Decimal

import pytest
from sqlalchemy import func, select

from app.core.constants import ErrorCode, OrderStatus, PromotionType
from app.core.exceptions import InternalError, InvalidInputError, NotFoundError
from app.dto.orders import OrderCreate
from app.dto.products import ProductCreate, ProductUpdate
from app.dto.promotions import PromotionCreate
from app.models.orders import Order, OrderItem
from app.repository.orders import OrdersRepository

from helpers import in_days, order_payload, product_payload, weighted_slabs_payload


@pytest.fixture
async def products(product_service):
    rice = await product_service.create_product(ProductCreate(**product_payload(sku="RICE-5KG", slug="rice", unit_price="100.00", weight_grams=300)))
    oil = await product_service.create_product(ProductCreate(**product_payload(sku="OIL-1L", slug="oil", unit_price="50.00", weight_grams=1000)))
    return rice, oil


@pytest.fixture
async def ten_percent(promotion_service):
    return await promotion_service.create_promotion(
        PromotionCreate(title="Ten off", type=PromotionType.PERCENTAGE, percentage_value=Decimal("10"), priority=5)
    )


@pytest.fixture
async def bulk(promotion_service):
    return await promotion_service.create_promotion(
        PromotionCreate(title="Bulk", type=PromotionType.WEIGHTED, slabs=weighted_slabs_payload(), priority=1)
    )


def count_rows(session_factory, model):
    with session_factory() as db:
        return db.execute(select(func.count(model.id))).scalar_one()


async def test_order_without_promotions(order_service, products, now):
    rice, oil = products

    order = await order_service.create_order(OrderCreate(**order_payload([(rice.id, 3), (oil.id, 1)])))

    assert order.status == OrderStatus.PENDING
    assert order.subtotal == 350.0
    assert order.discount == 0.0
    assert order.total == 350.0
    assert order.currency == "BDT"
    assert order.created_at.replace(tzinfo=None) == now.replace(tzinfo=None)
    assert [(item.product_sku, item.quantity, item.total) for item in order.items] == [("RICE-5KG", 3, 300.0), ("OIL-1L", 1, 50.0)]


async def test_all_active_promotions_stack_on_each_line(order_service, products, ten_percent, bulk):
    rice, _ = products

    order = await order_service.create_order(OrderCreate(**order_payload([(rice.id, 2)])))

    item = order.items[0]
    # 10% of 200 plus 600g in the 501-1000g tier at 10 per unit
    assert item.discount == 40.0
    assert item.total == 160.0
    assert [(a.promotion_name, a.inferred_type, a.discount_amount) for a in item.applied_promotions] == [
        ("Ten off", "PERCENTAGE", 20.0),
        ("Bulk", "WEIGHTED", 20.0),
    ]
    assert order.promotion_id is None
    assert order.total == 160.0


async def test_requested_promotion_only(order_service, products, ten_percent, bulk):
    rice, _ = products

    order = await order_service.create_order(OrderCreate(**order_payload([(rice.id, 2)], promotion_id=bulk.id)))

    assert order.promotion_id == bulk.id
    assert order.discount == 20.0
    assert [a.promotion_id for a in order.items[0].applied_promotions] == [bulk.id]


async def test_requested_promotion_that_is_not_active(order_service, promotion_service, products, ten_percent):
    rice, _ = products
    await promotion_service.toggle_promotion(ten_percent.id, False)

    order = await order_service.create_order(OrderCreate(**order_payload([(rice.id, 1)], promotion_id=ten_percent.id)))

    assert order.discount == 0.0
    assert order.promotion_id is None


async def test_expired_promotions_are_ignored(order_service, promotion_service, products):
    rice, _ = products
    await promotion_service.create_promotion(
        PromotionCreate(title="Old", type=PromotionType.FIXED, fixed_value=Decimal("5"), end_date=in_days(-1))
    )

    order = await order_service.create_order(OrderCreate(**order_payload([(rice.id, 1)])))

    assert order.discount == 0.0


async def test_line_discount_never_exceeds_subtotal(order_service, promotion_service, products, ten_percent):
    _, oil = products
    await promotion_service.create_promotion(PromotionCreate(title="Huge", type=PromotionType.FIXED, fixed_value=Decimal("80")))

    order = await order_service.create_order(OrderCreate(**order_payload([(oil.id, 2)])))

    assert order.subtotal == 100.0
    assert order.discount == 100.0
    assert order.total == 0.0


async def test_every_request_violation_is_reported(order_service, products):
    rice, _ = products
    payload = order_payload([(rice.id, 0), (rice.id, 1001)])

    with pytest.raises(InvalidInputError) as exc_info:
        await order_service.create_order(OrderCreate(**payload))

    codes = [error["code"] for error in exc_info.value.errors]
    assert codes.count(ErrorCode.INVALID_QUANTITY) == 2
    assert ErrorCode.DUPLICATE_PRODUCT in codes


async def test_empty_order_is_rejected(order_service):
    with pytest.raises(InvalidInputError) as exc_info:
        await order_service.create_order(OrderCreate(**order_payload([])))

    assert exc_info.value.errors[0]["code"] == ErrorCode.EMPTY_ORDER


async def test_too_many_items(order_service):
    items = [(f"p-{index}", 1) for index in range(51)]

    with pytest.raises(InvalidInputError) as exc_info:
        await order_service.create_order(OrderCreate(**order_payload(items)))

    assert exc_info.value.errors[0]["code"] == ErrorCode.TOO_MANY_ITEMS


async def test_missing_and_inactive_products_are_all_listed(order_service, product_service, products, session_factory):
    rice, oil = products
    await product_service.toggle_product(oil.id, False)

    with pytest.raises(InvalidInputError) as exc_info:
        await order_service.create_order(OrderCreate(**order_payload([(rice.id, 1), (oil.id, 1), ("ghost", 1)])))

    assert exc_info.value.errors[0]["code"] == ErrorCode.PRODUCT_NOT_FOUND
    assert exc_info.value.errors[0]["product_ids"] == [oil.id, "ghost"]
    assert count_rows(session_factory, Order) == 0


async def test_failed_line_write_rolls_back_the_order(order_service, products, session_factory, monkeypatch):
    rice, _ = products
    original = OrdersRepository.create_transactional

    def failing_create(self, order, items):
        original(self, order, items)
        raise InternalError("Failed to create order")

    monkeypatch.setattr(OrdersRepository, "create_transactional", failing_create)

    with pytest.raises(InternalError):
        await order_service.create_order(OrderCreate(**order_payload([(rice.id, 1)])))

    assert count_rows(session_factory, Order) == 0
    assert count_rows(session_factory, OrderItem) == 0


async def test_order_is_a_snapshot(order_service, product_service, products):
    rice, _ = products
    order = await order_service.create_order(OrderCreate(**order_payload([(rice.id, 1)])))

    await product_service.update_product(rice.id, ProductUpdate(unit_price=Decimal("500.00"), name="Renamed"))
    fetched = await order_service.get_order(order.id)

    assert fetched.items[0].unit_price == 100.0
    assert fetched.items[0].product_name == rice.name


async def test_lookups(order_service, products):
    rice, oil = products
    first = await order_service.create_order(OrderCreate(**order_payload([(rice.id, 1)], customer_id="alice")))
    await order_service.create_order(OrderCreate(**order_payload([(oil.id, 1)], customer_id="bob")))

    assert (await order_service.get_order(first.id)).id == first.id
    assert [o.id for o in await order_service.get_customer_orders("alice")] == [first.id]
    assert await order_service.get_customer_orders("nobody") == []

    with pytest.raises(NotFoundError):
        await order_service.get_order("missing")


async def test_list_orders_paginates_and_filters(order_service, products):
    rice, oil = products
    created = []
    for quantity in (1, 2, 3):
        created.append(await order_service.create_order(OrderCreate(**order_payload([(rice.id, quantity)]))))
    await order_service.update_order_status(created[0].id, OrderStatus.CANCELLED)

    page = await order_service.list_orders(page=1, page_size=2, sort_by="total", sort_order="desc")
    pending = await order_service.list_orders(status=OrderStatus.PENDING)

    assert page.total_count == 3
    assert page.total_pages == 2
    assert [o.total for o in page.orders] == [300.0, 200.0]
    assert {o.id for o in pending.orders} == {created[1].id, created[2].id}


@pytest.mark.parametrize("page, page_size", [(0, 10), (1, 0), (1, 101)])
async def test_list_orders_rejects_bad_paging(order_service, page, page_size):
    with pytest.raises(InvalidInputError):
        await order_service.list_orders(page=page, page_size=page_size)


async def test_stats(order_service, analytics_service, products):
    rice, oil = products
    await order_service.create_order(OrderCreate(**order_payload([(rice.id, 1)])))
    await order_service.create_order(OrderCreate(**order_payload([(oil.id, 1)])))

    stats = await order_service.get_stats()
    dashboard = await analytics_service.get_dashboard_stats()

    assert stats.total_orders == 2
    assert stats.total_revenue == 150.0
    assert stats.average_order_value == 75.0
    assert stats.todays_orders == 2
    assert dashboard["orders"]["total"] == 2
    assert dashboard["orders"]["today"] == 2
    assert dashboard["revenue"]["all_time"] == 150.0
    assert dashboard["products"] == {"total": 2, "active": 2, "inactive": 0}
    assert dashboard["promotions"] == {"total": 0, "active": 0, "inactive": 0}


async def test_stats_without_orders(order_service):
    stats = await order_service.get_stats()

    assert stats.total_orders == 0
    assert stats.average_order_value == 0.0
