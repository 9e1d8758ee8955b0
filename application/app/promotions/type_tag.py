"""
Reading and writing the structured promotion tag.

Stored format: comma separated KEY:VALUE pairs, e.g.
"TYPE:PERCENTAGE,PERCENTAGE:10" or "TYPE:FIXED,FIXED:5".
"""
from decimal import Decimal, InvalidOperation
from typing import Optional

from app.core.constants import PromotionType
from app.promotions.types import TypeTag


def _parse_amount(raw: str) -> Optional[Decimal]:
    try:
        value = Decimal(raw.strip())
    except InvalidOperation:
        return None
    return value if value.is_finite() else None


def parse_type_tag(text: Optional[str]) -> Optional[TypeTag]:
    """Parse a stored tag. Unknown keys, unknown types and bad numbers are ignored."""
    if not text or not text.strip():
        return None

    promotion_type = None
    percentage_value = None
    fixed_value = None

    for part in text.split(","):
        key, sep, value = part.partition(":")
        if not sep:
            continue
        key = key.strip().upper()
        if key == "TYPE":
            try:
                promotion_type = PromotionType(value.strip().upper())
            except ValueError:
                promotion_type = None
        elif key == "PERCENTAGE":
            percentage_value = _parse_amount(value)
        elif key == "FIXED":
            fixed_value = _parse_amount(value)

    return TypeTag(promotion_type=promotion_type, percentage_value=percentage_value, fixed_value=fixed_value)


def format_type_tag(tag: TypeTag) -> str:
    parts = []
    if tag.promotion_type is not None:
        parts.append(f"TYPE:{tag.promotion_type.value}")
    if tag.percentage_value is not None:
        parts.append(f"PERCENTAGE:{tag.percentage_value.normalize():f}")
    if tag.fixed_value is not None:
        parts.append(f"FIXED:{tag.fixed_value.normalize():f}")
    return ",".join(parts)
