"""
Discount calculation.

Pure functions over snapshots: no I/O, no clock reads. A promotion that
does not apply is a normal result (applied=False with a reason), never an
exception.
"""
from datetime import datetime
from typing import Optional

# Constants
from app.core.constants import DiscountReason, PromotionType

# Inference
from app.promotions.inference import infer_promotion_type
from app.promotions.types import DiscountResult, ProductSnapshot, PromotionSnapshot

# Strategies
from app.promotions.strategy.fixed import FixedDiscountStrategy
from app.promotions.strategy.percentage import PercentageDiscountStrategy
from app.promotions.strategy.weighted import WeightedDiscountStrategy

from app.utils.datetime_helpers import ensure_utc

STRATEGIES = {
    PromotionType.PERCENTAGE: PercentageDiscountStrategy(),
    PromotionType.FIXED: FixedDiscountStrategy(),
    PromotionType.WEIGHTED: WeightedDiscountStrategy(),
}


def calculate_discount(promotion: PromotionSnapshot, product: ProductSnapshot, quantity: int) -> DiscountResult:
    """Compute the discount one promotion gives a product line.

    Args:
        promotion: Promotion snapshot with its slabs
        product: Product snapshot
        quantity: Positive number of units

    Returns:
        DiscountResult with the exact (unrounded) amount

    Raises:
        ValueError: quantity is not a positive integer
    """
    if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity < 1:
        raise ValueError(f"quantity must be a positive integer, got {quantity!r}")

    promotion_type = infer_promotion_type(promotion)
    strategy = STRATEGIES.get(promotion_type)
    if strategy is None:
        return DiscountResult.not_applied(DiscountReason.UNKNOWN_TYPE)
    return strategy.compute_discount(promotion, product, quantity)


def check_availability(promotion: PromotionSnapshot, now: datetime) -> Optional[str]:
    """Reason the promotion cannot be used at `now`, or None if it can."""
    if not promotion.is_active:
        return DiscountReason.DISABLED
    now = ensure_utc(now)
    starts_at = ensure_utc(promotion.starts_at)
    ends_at = ensure_utc(promotion.ends_at)
    if starts_at is not None and starts_at > now:
        return DiscountReason.NOT_STARTED
    if ends_at is not None and ends_at < now:
        return DiscountReason.EXPIRED
    return None


def evaluate_promotion(promotion: PromotionSnapshot, product: ProductSnapshot, quantity: int, now: datetime) -> DiscountResult:
    reason = check_availability(promotion, now)
    if reason is not None:
        return DiscountResult.not_applied(reason, infer_promotion_type(promotion))
    return calculate_discount(promotion, product, quantity)
