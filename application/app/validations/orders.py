from collections import Counter
from typing import Dict, List

from app.core.constants import ErrorCode
from app.dto.orders import OrderCreate
from app.logging.utils import get_app_logger

# Settings
from app.config.settings import OMSConfigs
configs = OMSConfigs()

logger = get_app_logger('app.validations.orders')


class OrderCreateValidator:
    def __init__(self, order: OrderCreate, max_items: int | None = None, max_quantity: int | None = None):
        self.order = order
        self.max_items = max_items or configs.MAX_ORDER_ITEMS
        self.max_quantity = max_quantity or configs.MAX_ITEM_QUANTITY
        self.errors: List[Dict] = []

    def validate_items_count(self):
        count = len(self.order.items)
        if count < 1:
            self.errors.append({"code": ErrorCode.EMPTY_ORDER, "field": "items", "message": "Order must contain at least one item"})
        elif count > self.max_items:
            self.errors.append({"code": ErrorCode.TOO_MANY_ITEMS, "field": "items", "message": f"Maximum {self.max_items} items per order"})

    def validate_quantities(self):
        for index, item in enumerate(self.order.items):
            if not 1 <= item.quantity <= self.max_quantity:
                self.errors.append({
                    "code": ErrorCode.INVALID_QUANTITY,
                    "field": f"items[{index}].quantity",
                    "message": f"Quantity for product {item.product_id} must be between 1 and {self.max_quantity}",
                })

    def validate_duplicate_products(self):
        counts = Counter(item.product_id for item in self.order.items)
        duplicates = sorted(product_id for product_id, count in counts.items() if count > 1)
        if duplicates:
            self.errors.append({
                "code": ErrorCode.DUPLICATE_PRODUCT,
                "field": "items",
                "message": f"Duplicate products in order: {', '.join(duplicates)}",
                "product_ids": duplicates,
            })

    def validate_all(self) -> List[Dict]:
        self.validate_items_count()
        self.validate_quantities()
        self.validate_duplicate_products()
        if self.errors:
            logger.warning(f"order_validation_failed | customer_id={self.order.customer_id} violations={len(self.errors)}")
        return self.errors


def missing_products_error(missing_ids: List[str]) -> Dict:
    return {
        "code": ErrorCode.PRODUCT_NOT_FOUND,
        "field": "items",
        "message": f"Products not found or inactive: {', '.join(missing_ids)}",
        "product_ids": missing_ids,
    }


def validate_page_size(page: int, page_size: int, max_page_size: int | None = None) -> List[Dict]:
    max_page_size = max_page_size or configs.MAX_PAGE_SIZE
    errors = []
    if page < 1:
        errors.append({"code": ErrorCode.INVALID_INPUT, "field": "page", "message": "Page number must be 1 or greater"})
    if not 1 <= page_size <= max_page_size:
        errors.append({"code": ErrorCode.INVALID_INPUT, "field": "page_size", "message": f"Page size must be between 1 and {max_page_size}"})
    return errors
