from decimal import Decimal

from app.core.constants import DiscountReason, PromotionType
from app.promotions.types import DiscountResult, ProductSnapshot, PromotionSnapshot
from .base import BasePromotionStrategy


class WeightedDiscountStrategy(BasePromotionStrategy):
    def compute_discount(self, promotion: PromotionSnapshot, product: ProductSnapshot, quantity: int) -> DiscountResult:
        total_weight = Decimal(product.weight_grams) * quantity

        # ascending range_start; the lower slab wins a shared boundary
        for slab in promotion.active_slabs:
            if slab.contains(total_weight):
                return DiscountResult.applied_amount(slab.rule_value * quantity, PromotionType.WEIGHTED)

        return DiscountResult.not_applied(
            DiscountReason.NO_MATCHING_SLAB.format(weight=total_weight),
            PromotionType.WEIGHTED,
        )
