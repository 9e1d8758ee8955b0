from decimal import Decimal
from typing import Optional

from app.core.constants import DiscountReason, PromotionType, SlabRuleKind
from app.promotions.types import DiscountResult, ProductSnapshot, PromotionSnapshot
from .base import BasePromotionStrategy


class FixedDiscountStrategy(BasePromotionStrategy):
    def resolve_amount(self, promotion: PromotionSnapshot) -> Optional[Decimal]:
        """Tag value wins over the slab value."""
        tag = promotion.type_tag
        if tag is not None and tag.fixed_value:
            return tag.fixed_value
        slab = next(
            (s for s in promotion.active_slabs if s.rule_kind == SlabRuleKind.FIXED_AMOUNT_DISCOUNT),
            None,
        )
        return slab.rule_value if slab is not None else None

    def compute_discount(self, promotion: PromotionSnapshot, product: ProductSnapshot, quantity: int) -> DiscountResult:
        amount = self.resolve_amount(promotion)
        if amount is None or amount <= 0:
            return DiscountResult.not_applied(DiscountReason.MISSING_FIXED_AMOUNT, PromotionType.FIXED)
        return DiscountResult.applied_amount(amount * quantity, PromotionType.FIXED)
