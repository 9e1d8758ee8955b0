"""
ORM rows -> engine snapshots.
"""
from decimal import Decimal

from app.core.constants import SlabRuleKind
from app.models.products import Product
from app.models.promotions import Promotion, PromotionSlab
from app.promotions.type_tag import parse_type_tag
from app.promotions.types import ProductSnapshot, PromotionSnapshot, SlabRule
from app.utils.datetime_helpers import ensure_utc


def _rule_kind(value):
    # unknown kinds from legacy rows are kept as plain strings and never match a strategy
    try:
        return SlabRuleKind(value)
    except ValueError:
        return value


def slab_to_rule(slab: PromotionSlab) -> SlabRule:
    return SlabRule(
        id=slab.id,
        rule_kind=_rule_kind(slab.rule_kind),
        rule_value=Decimal(str(slab.rule_value)),
        range_start=Decimal(str(slab.range_start if slab.range_start is not None else 0)),
        range_end=Decimal(str(slab.range_end)) if slab.range_end is not None else None,
        is_active=bool(slab.is_active),
    )


def promotion_to_snapshot(promotion: Promotion) -> PromotionSnapshot:
    return PromotionSnapshot(
        id=promotion.id,
        name=promotion.name,
        is_active=bool(promotion.is_active),
        starts_at=ensure_utc(promotion.starts_at),
        ends_at=ensure_utc(promotion.ends_at),
        priority=promotion.priority or 0,
        type_tag=parse_type_tag(promotion.type_tag),
        slabs=tuple(slab_to_rule(slab) for slab in promotion.slabs),
    )


def product_to_snapshot(product: Product) -> ProductSnapshot:
    return ProductSnapshot(
        id=product.id,
        name=product.name,
        sku=product.sku,
        unit_price=Decimal(str(product.unit_price)),
        weight_grams=int(product.weight_grams or 0),
    )
