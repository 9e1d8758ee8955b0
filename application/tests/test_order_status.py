import pytest

from app.core.constants import OrderStatus
from app.core.exceptions import InvalidStatusTransitionError, NotFoundError
from app.dto.orders import OrderCreate
from app.dto.products import ProductCreate

from helpers import order_payload, product_payload


@pytest.mark.parametrize("current, target, allowed", [
    (OrderStatus.PENDING, OrderStatus.CONFIRMED, True),
    (OrderStatus.CONFIRMED, OrderStatus.PAID, True),
    (OrderStatus.PAID, OrderStatus.FULFILLED, True),
    (OrderStatus.PENDING, OrderStatus.CANCELLED, True),
    (OrderStatus.PAID, OrderStatus.CANCELLED, True),
    (OrderStatus.PENDING, OrderStatus.PAID, False),
    (OrderStatus.CONFIRMED, OrderStatus.PENDING, False),
    (OrderStatus.PENDING, OrderStatus.PENDING, False),
    (OrderStatus.FULFILLED, OrderStatus.CANCELLED, False),
    (OrderStatus.CANCELLED, OrderStatus.PENDING, False),
])
def test_transition_table(current, target, allowed):
    assert current.can_transition_to(target) is allowed


def test_terminal_statuses_allow_nothing():
    for status in OrderStatus.terminal_statuses():
        assert status.allowed_transitions() == set()


@pytest.fixture
async def order(order_service, product_service):
    product = await product_service.create_product(ProductCreate(**product_payload()))
    return await order_service.create_order(OrderCreate(**order_payload([(product.id, 1)])))


async def test_walks_the_happy_path(order_service, order):
    for status in (OrderStatus.CONFIRMED, OrderStatus.PAID, OrderStatus.FULFILLED):
        updated = await order_service.update_order_status(order.id, status)
        assert updated.status == status

    assert (await order_service.get_order(order.id)).status == OrderStatus.FULFILLED


async def test_skipping_a_step_is_rejected(order_service, order):
    with pytest.raises(InvalidStatusTransitionError) as exc_info:
        await order_service.update_order_status(order.id, OrderStatus.FULFILLED)

    assert exc_info.value.status_code == 409
    assert (await order_service.get_order(order.id)).status == OrderStatus.PENDING


async def test_cancelled_is_final(order_service, order):
    await order_service.update_order_status(order.id, OrderStatus.CANCELLED)

    with pytest.raises(InvalidStatusTransitionError):
        await order_service.update_order_status(order.id, OrderStatus.CONFIRMED)


async def test_unknown_order(order_service):
    with pytest.raises(NotFoundError):
        await order_service.update_order_status("missing", OrderStatus.CONFIRMED)
