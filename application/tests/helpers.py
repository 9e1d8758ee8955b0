"""Builders for engine snapshots and API payloads used across the tests."""
from datetime import datetime, timedelta, timezone
from decimal import Decimal

from app.core.constants import PromotionType, SlabRuleKind
from app.promotions.types import ProductSnapshot, PromotionSnapshot, SlabRule, TypeTag

NOW = datetime(2025, 6, 15, 12, 0, tzinfo=timezone.utc)


def in_days(days):
    return NOW + timedelta(days=days)


def make_product(unit_price="100.00", weight_grams=0, product_id="p-1"):
    return ProductSnapshot(
        id=product_id,
        name=f"Product {product_id}",
        sku=f"SKU-{product_id}",
        unit_price=Decimal(unit_price),
        weight_grams=weight_grams,
    )


def percentage_slab(value, **kwargs):
    return SlabRule(rule_kind=SlabRuleKind.PERCENTAGE_DISCOUNT, rule_value=Decimal(value), **kwargs)


def fixed_slab(value, start="0", end=None, **kwargs):
    return SlabRule(
        rule_kind=SlabRuleKind.FIXED_AMOUNT_DISCOUNT,
        rule_value=Decimal(value),
        range_start=Decimal(start),
        range_end=Decimal(end) if end is not None else None,
        **kwargs,
    )


def make_promotion(slabs=(), promotion_type=None, type_tag=None, promotion_id="promo-1", **kwargs):
    if promotion_type is not None:
        type_tag = TypeTag(promotion_type=promotion_type)
    return PromotionSnapshot(
        id=promotion_id,
        name=f"Promotion {promotion_id}",
        type_tag=type_tag,
        slabs=tuple(slabs),
        **kwargs,
    )


def weighted_promotion(promotion_id="weighted-1", **kwargs):
    """0-500g -> 5, 501-1000g -> 10, 1001g and up -> 20 per unit."""
    return make_promotion(
        slabs=[
            fixed_slab("5", "0", "500"),
            fixed_slab("10", "501", "1000"),
            fixed_slab("20", "1001"),
        ],
        promotion_type=PromotionType.WEIGHTED,
        promotion_id=promotion_id,
        **kwargs,
    )


# API payloads

def product_payload(sku="SKU-1", slug="product-1", unit_price="100.00", weight_grams=0, **kwargs):
    payload = {
        "name": kwargs.pop("name", f"Product {sku}"),
        "slug": slug,
        "sku": sku,
        "unit_price": unit_price,
        "weight_grams": weight_grams,
    }
    payload.update(kwargs)
    return payload


def weighted_slabs_payload():
    return [
        {"min_weight": 0, "max_weight": 500, "discount_per_unit": "5.00"},
        {"min_weight": 501, "max_weight": 1000, "discount_per_unit": "10.00"},
        {"min_weight": 1001, "discount_per_unit": "20.00"},
    ]


def order_payload(items, customer_id="cust-1", promotion_id=None):
    payload = {
        "customer_id": customer_id,
        "customer_info": {"name": "Rahim Uddin", "email": "rahim@example.com", "phone": "01700000000"},
        "items": [{"product_id": product_id, "quantity": quantity} for product_id, quantity in items],
    }
    if promotion_id is not None:
        payload["promotion_id"] = promotion_id
    return payload
