from decimal import Decimal

import pytest

from app.core.constants import PromotionType
from app.core.exceptions import InvalidInputError
from app.core.orders_creation import pricing
from app.core.orders_creation.pricing import LineRequest, price_line, price_order, select_promotions

from helpers import fixed_slab, make_product, make_promotion, percentage_slab, weighted_promotion


@pytest.fixture
def ten_percent():
    return make_promotion(slabs=[percentage_slab("10")], promotion_id="pct-10")


@pytest.fixture
def five_off():
    return make_promotion(slabs=[fixed_slab("5")], promotion_id="fixed-5")


def test_single_line_percentage(ten_percent):
    order = price_order([LineRequest(make_product("100.00"), 3)], [ten_percent])

    assert order.subtotal == Decimal("300.00")
    assert order.discount == Decimal("30.00")
    assert order.grand_total == Decimal("270.00")
    assert order.promotion_id is None


def test_all_active_promotions_stack(ten_percent, five_off):
    line = price_line(LineRequest(make_product("50.00"), 4), [ten_percent, five_off])

    assert line.subtotal == Decimal("200.00")
    assert line.discount == Decimal("40.00")
    assert line.total == Decimal("160.00")
    assert [a.promotion_id for a in line.applied_promotions] == ["pct-10", "fixed-5"]
    assert [a.discount_amount for a in line.applied_promotions] == [Decimal("20.00"), Decimal("20.00")]


def test_stacked_discount_is_capped_at_line_subtotal(ten_percent):
    heavy = make_promotion(
        slabs=[fixed_slab("2", "0", "500"), fixed_slab("200", "501")],
        promotion_type=PromotionType.WEIGHTED,
        promotion_id="weighted-heavy",
    )

    line = price_line(LineRequest(make_product("100.00", weight_grams=300), 2), [ten_percent, heavy])

    assert sum(a.discount_amount for a in line.applied_promotions) == Decimal("420.00")
    assert line.discount == line.subtotal == Decimal("200.00")
    assert line.total == Decimal("0.00")


def test_requested_promotion_restricts_discounts(ten_percent, five_off):
    order = price_order([LineRequest(make_product("50.00"), 4)], [ten_percent, five_off], promotion_id="fixed-5")

    assert order.discount == Decimal("20.00")
    assert order.promotion_id == "fixed-5"
    assert [a.promotion_id for a in order.lines[0].applied_promotions] == ["fixed-5"]


def test_requested_promotion_not_active_gives_no_discount(ten_percent):
    order = price_order([LineRequest(make_product("50.00"), 1)], [ten_percent], promotion_id="missing")

    assert order.discount == Decimal("0.00")
    assert order.grand_total == Decimal("50.00")
    assert order.promotion_id is None


def test_select_promotions():
    promotions = [make_promotion(promotion_id="a"), make_promotion(promotion_id="b")]

    assert select_promotions(promotions, None) == tuple(promotions)
    assert [p.id for p in select_promotions(promotions, "b")] == ["b"]
    assert select_promotions(promotions, "c") == ()


def test_not_applied_promotions_are_left_out(ten_percent):
    promotion = weighted_promotion(promotion_id="weighted")
    no_match = make_promotion(slabs=[fixed_slab("5", "100", "200"), fixed_slab("7", "201", "300")], promotion_id="narrow")

    line = price_line(LineRequest(make_product("10.00", weight_grams=1000), 1), [promotion, no_match])

    assert [a.promotion_id for a in line.applied_promotions] == ["weighted"]
    assert line.applied_promotions[0].inferred_type == PromotionType.WEIGHTED
    assert line.discount == Decimal("10.00")


def test_per_promotion_amounts_are_rounded_half_up():
    promotion = make_promotion(slabs=[percentage_slab("12.5")])

    line = price_line(LineRequest(make_product("0.20"), 1), [promotion])

    assert line.discount == Decimal("0.03")


def test_order_totals_sum_lines(ten_percent, five_off):
    lines = [
        LineRequest(make_product("100.00", product_id="a"), 1),
        LineRequest(make_product("3.00", product_id="b"), 2),
    ]

    order = price_order(lines, [ten_percent, five_off])

    assert [line.discount for line in order.lines] == [Decimal("15.00"), Decimal("6.00")]
    assert order.subtotal == Decimal("106.00")
    assert order.discount == Decimal("21.00")
    assert order.grand_total == Decimal("85.00")
    for line in order.lines:
        assert Decimal("0") <= line.discount <= line.subtotal
    assert Decimal("0") <= order.discount <= order.subtotal


def test_no_promotions():
    order = price_order([LineRequest(make_product("12.34"), 2)], [])

    assert order.discount == Decimal("0.00")
    assert order.grand_total == Decimal("24.68")
    assert order.lines[0].applied_promotions == ()


def test_negative_total_is_rejected(monkeypatch, ten_percent):
    def broken_line(line, promotions):
        priced = original(line, promotions)
        return pricing.PricedLine(
            product=priced.product,
            quantity=priced.quantity,
            subtotal=priced.subtotal,
            discount=priced.subtotal + 1,
            total=Decimal("-1"),
        )

    original = pricing.price_line
    monkeypatch.setattr(pricing, "price_line", broken_line)

    with pytest.raises(InvalidInputError) as exc_info:
        price_order([LineRequest(make_product("10.00"), 1)], [ten_percent])

    assert exc_info.value.errors[0]["code"] == "NEGATIVE_TOTAL"


def test_applied_promotion_serializes_for_storage(ten_percent):
    line = price_line(LineRequest(make_product("100.00"), 1), [ten_percent])

    assert line.applied_promotions[0].to_dict() == {
        "promotion_id": "pct-10",
        "promotion_name": "Promotion pct-10",
        "inferred_type": "PERCENTAGE",
        "discount_amount": 10.0,
    }
