from app.core.constants import PromotionType, SlabRuleKind
from app.promotions.types import PromotionSnapshot


def infer_promotion_type(promotion: PromotionSnapshot) -> PromotionType:
    """Resolve the promotion type from its tag, falling back to the shape of its slabs.

    Order of precedence:
        1. explicit type in the tag
        2. more than one active slab -> WEIGHTED
        3. a single active slab: percentage kind -> PERCENTAGE; fixed kind with a
           weight range (non-zero start and bounded end) -> WEIGHTED, else FIXED
        4. no slabs -> PERCENTAGE
    """
    tag = promotion.type_tag
    if tag is not None and tag.promotion_type is not None:
        return tag.promotion_type

    slabs = promotion.active_slabs
    if len(slabs) > 1:
        return PromotionType.WEIGHTED

    if len(slabs) == 1:
        slab = slabs[0]
        if slab.rule_kind == SlabRuleKind.PERCENTAGE_DISCOUNT:
            return PromotionType.PERCENTAGE
        if slab.range_start != 0 and slab.range_end is not None:
            return PromotionType.WEIGHTED
        return PromotionType.FIXED

    return PromotionType.PERCENTAGE
