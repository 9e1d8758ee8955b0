"""
Order pricing: runs the discount engine over every line of an order.

All active promotions stack additively on a line unless the caller names a
single promotion. A line's discount is capped at its subtotal, so no line
and no order can go negative.
"""
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional, Sequence, Tuple

from app.core.constants import ErrorCode, Money, PromotionType
from app.core.exceptions import InvalidInputError
from app.promotions.engine import calculate_discount
from app.promotions.types import ProductSnapshot, PromotionSnapshot
from app.utils.money import quantize_money

# Logger
from app.logging.utils import get_app_logger
logger = get_app_logger("app.core.orders_creation.pricing")


@dataclass(frozen=True)
class LineRequest:
    product: ProductSnapshot
    quantity: int


@dataclass(frozen=True)
class AppliedPromotion:
    promotion_id: str
    promotion_name: str
    inferred_type: PromotionType
    discount_amount: Decimal

    def to_dict(self) -> dict:
        return {
            "promotion_id": self.promotion_id,
            "promotion_name": self.promotion_name,
            "inferred_type": self.inferred_type.value,
            "discount_amount": float(self.discount_amount),
        }


@dataclass(frozen=True)
class PricedLine:
    product: ProductSnapshot
    quantity: int
    subtotal: Decimal
    discount: Decimal
    total: Decimal
    applied_promotions: Tuple[AppliedPromotion, ...] = ()


@dataclass(frozen=True)
class PricedOrder:
    lines: Tuple[PricedLine, ...]
    subtotal: Decimal
    discount: Decimal
    grand_total: Decimal
    promotion_id: Optional[str] = None


def select_promotions(promotions: Sequence[PromotionSnapshot], promotion_id: Optional[str]) -> Tuple[PromotionSnapshot, ...]:
    """All active promotions, or only the requested one when it is among them."""
    if not promotion_id:
        return tuple(promotions)
    return tuple(p for p in promotions if p.id == promotion_id)


def price_line(line: LineRequest, promotions: Sequence[PromotionSnapshot]) -> PricedLine:
    subtotal = quantize_money(line.product.unit_price * line.quantity)

    applied = []
    for promotion in promotions:
        result = calculate_discount(promotion, line.product, line.quantity)
        if not result.applied:
            logger.info(f"promotion_not_applied | promotion_id={promotion.id} product_id={line.product.id} reason={result.reason}")
            continue
        amount = quantize_money(result.discount_amount)
        if amount <= 0:
            continue
        applied.append(AppliedPromotion(promotion.id, promotion.name, result.promotion_type, amount))

    discount = min(sum((a.discount_amount for a in applied), Money.ZERO), subtotal)
    return PricedLine(
        product=line.product,
        quantity=line.quantity,
        subtotal=subtotal,
        discount=discount,
        total=subtotal - discount,
        applied_promotions=tuple(applied),
    )


def price_order(
    lines: Sequence[LineRequest],
    promotions: Sequence[PromotionSnapshot],
    promotion_id: Optional[str] = None,
) -> PricedOrder:
    """Price every line against the active promotions and total the order.

    Args:
        lines: Resolved products with quantities
        promotions: Active promotions, highest priority first
        promotion_id: Restrict discounts to this promotion

    Raises:
        InvalidInputError: the grand total came out negative
    """
    candidates = select_promotions(promotions, promotion_id)
    if promotion_id and not candidates:
        logger.warning(f"requested_promotion_not_active | promotion_id={promotion_id}")

    priced = tuple(price_line(line, candidates) for line in lines)
    subtotal = sum((line.subtotal for line in priced), Money.ZERO)
    discount = sum((line.discount for line in priced), Money.ZERO)
    grand_total = subtotal - discount

    if grand_total < 0:
        raise InvalidInputError(
            "Order total cannot be negative",
            errors=[{"code": ErrorCode.NEGATIVE_TOTAL, "field": "total", "message": f"Computed total {grand_total} is negative"}],
        )

    applied_promotion_id = candidates[0].id if promotion_id and candidates else None
    return PricedOrder(
        lines=priced,
        subtotal=subtotal,
        discount=discount,
        grand_total=grand_total,
        promotion_id=applied_promotion_id,
    )
