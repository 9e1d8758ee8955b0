"""
Immutable snapshots the discount engine works on.

Snapshots are built once per request from the store, so a calculation
never sees a promotion or product change halfway through.
"""
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Optional, Tuple

from app.core.constants import Money, PromotionType, SlabRuleKind


@dataclass(frozen=True)
class SlabRule:
    """A range-tagged monetary rule. range_end None means unbounded."""

    rule_kind: SlabRuleKind
    rule_value: Decimal
    range_start: Decimal = Decimal("0")
    range_end: Optional[Decimal] = None
    is_active: bool = True
    id: Optional[str] = None

    def contains(self, value: Decimal) -> bool:
        # inclusive on both ends
        if value < self.range_start:
            return False
        return self.range_end is None or value <= self.range_end


@dataclass(frozen=True)
class TypeTag:
    """Explicit promotion configuration: the type plus its auxiliary values."""

    promotion_type: Optional[PromotionType] = None
    percentage_value: Optional[Decimal] = None
    fixed_value: Optional[Decimal] = None


@dataclass(frozen=True)
class PromotionSnapshot:
    id: str
    name: str
    is_active: bool = True
    starts_at: Optional[datetime] = None
    ends_at: Optional[datetime] = None
    priority: int = 0
    type_tag: Optional[TypeTag] = None
    slabs: Tuple[SlabRule, ...] = ()

    @property
    def active_slabs(self) -> Tuple[SlabRule, ...]:
        return tuple(sorted((s for s in self.slabs if s.is_active), key=lambda s: s.range_start))


@dataclass(frozen=True)
class ProductSnapshot:
    id: str
    name: str
    sku: str
    unit_price: Decimal
    weight_grams: int = 0


@dataclass(frozen=True)
class DiscountResult:
    discount_amount: Decimal = Money.ZERO
    applied: bool = False
    reason: Optional[str] = None
    promotion_type: Optional[PromotionType] = field(default=None, compare=False)

    @classmethod
    def applied_amount(cls, amount: Decimal, promotion_type: Optional[PromotionType] = None) -> "DiscountResult":
        return cls(discount_amount=amount, applied=True, promotion_type=promotion_type)

    @classmethod
    def not_applied(cls, reason: str, promotion_type: Optional[PromotionType] = None) -> "DiscountResult":
        return cls(discount_amount=Money.ZERO, applied=False, reason=reason, promotion_type=promotion_type)
