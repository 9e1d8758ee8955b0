"""
Core constants for the Promo OMS application

Order status lifecycle, promotion and slab kinds, and error codes shared
across validators, services and handlers.
"""
from decimal import Decimal
from enum import Enum


class OrderStatus(str, Enum):
    """Order lifecycle: PENDING -> CONFIRMED -> PAID -> FULFILLED, or CANCELLED"""

    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    PAID = "PAID"
    FULFILLED = "FULFILLED"
    CANCELLED = "CANCELLED"

    @classmethod
    def terminal_statuses(cls):
        return {cls.FULFILLED, cls.CANCELLED}

    def allowed_transitions(self):
        if self in OrderStatus.terminal_statuses():
            return set()
        return {ORDER_STATUS_FORWARD[self], OrderStatus.CANCELLED}

    def can_transition_to(self, target: "OrderStatus") -> bool:
        return target in self.allowed_transitions()


ORDER_STATUS_FORWARD = {
    OrderStatus.PENDING: OrderStatus.CONFIRMED,
    OrderStatus.CONFIRMED: OrderStatus.PAID,
    OrderStatus.PAID: OrderStatus.FULFILLED,
}


class PromotionType(str, Enum):
    PERCENTAGE = "PERCENTAGE"
    FIXED = "FIXED"
    WEIGHTED = "WEIGHTED"


class SlabRuleKind(str, Enum):
    PERCENTAGE_DISCOUNT = "PERCENTAGE_DISCOUNT"
    FIXED_AMOUNT_DISCOUNT = "FIXED_AMOUNT_DISCOUNT"


class DiscountReason:
    """Reasons attached to a not-applied discount result"""

    MISSING_SLAB = "missing slab"
    MISSING_FIXED_AMOUNT = "missing fixed amount"
    UNKNOWN_TYPE = "unknown promotion type"
    NO_MATCHING_SLAB = "No matching slab for weight {weight}g"
    DISABLED = "Promotion is disabled"
    NOT_STARTED = "Promotion has not started yet"
    EXPIRED = "Promotion has expired"


class ErrorCode:
    """Machine-readable codes used in error payloads"""

    INVALID_INPUT = "INVALID_INPUT"
    NOT_FOUND = "NOT_FOUND"
    CONFLICT = "CONFLICT"
    INTERNAL_ERROR = "INTERNAL_ERROR"

    # Slab ranges
    INVALID_SLAB_RANGES = "INVALID_SLAB_RANGES"
    RANGE_OVERLAP = "RANGE_OVERLAP"
    RANGE_ORDER = "RANGE_ORDER"

    # Orders
    EMPTY_ORDER = "EMPTY_ORDER"
    TOO_MANY_ITEMS = "TOO_MANY_ITEMS"
    INVALID_QUANTITY = "INVALID_QUANTITY"
    DUPLICATE_PRODUCT = "DUPLICATE_PRODUCT"
    PRODUCT_NOT_FOUND = "PRODUCT_NOT_FOUND"
    NEGATIVE_TOTAL = "NEGATIVE_TOTAL"
    INVALID_STATUS_TRANSITION = "INVALID_STATUS_TRANSITION"

    # Catalog
    DUPLICATE_SLUG = "DUPLICATE_SLUG"
    DUPLICATE_SKU = "DUPLICATE_SKU"

    # Promotions
    INVALID_DATE_RANGE = "INVALID_DATE_RANGE"


class Money:
    """Monetary precision: two decimal places, half-up rounding"""

    PLACES = Decimal("0.01")
    ZERO = Decimal("0.00")
    MAX_PRICE = Decimal("9999999.99")
