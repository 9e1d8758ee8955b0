from decimal import Decimal

from app.core.constants import DiscountReason, PromotionType, SlabRuleKind
from app.promotions.types import DiscountResult, ProductSnapshot, PromotionSnapshot
from .base import BasePromotionStrategy

HUNDRED = Decimal("100")


class PercentageDiscountStrategy(BasePromotionStrategy):
    def compute_discount(self, promotion: PromotionSnapshot, product: ProductSnapshot, quantity: int) -> DiscountResult:
        slab = next(
            (s for s in promotion.active_slabs if s.rule_kind == SlabRuleKind.PERCENTAGE_DISCOUNT),
            None,
        )
        if slab is None or not (0 < slab.rule_value <= HUNDRED):
            return DiscountResult.not_applied(DiscountReason.MISSING_SLAB, PromotionType.PERCENTAGE)

        discount = (slab.rule_value / HUNDRED) * product.unit_price * quantity
        return DiscountResult.applied_amount(discount, PromotionType.PERCENTAGE)
