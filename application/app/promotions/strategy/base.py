from abc import ABC, abstractmethod

from app.promotions.types import DiscountResult, ProductSnapshot, PromotionSnapshot


class BasePromotionStrategy(ABC):
    @abstractmethod
    def compute_discount(self, promotion: PromotionSnapshot, product: ProductSnapshot, quantity: int) -> DiscountResult:
        pass
