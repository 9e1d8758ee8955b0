from typing import Dict, List, Optional, Sequence

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.exceptions import ConflictError, InternalError
from app.models.products import Product
from app.logging.utils import get_app_logger

logger = get_app_logger("app.repository.products")


class ProductsRepository:
    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, product_id: str) -> Optional[Product]:
        return self.db.get(Product, product_id)

    def find_by_slug(self, slug: str) -> Optional[Product]:
        return self.db.execute(select(Product).where(Product.slug == slug)).scalar_one_or_none()

    def find_by_sku(self, sku: str) -> Optional[Product]:
        return self.db.execute(select(Product).where(Product.sku == sku)).scalar_one_or_none()

    def find_active_by_ids(self, product_ids: Sequence[str]) -> List[Product]:
        if not product_ids:
            return []
        try:
            query = select(Product).where(Product.id.in_(list(product_ids)), Product.is_active.is_(True))
            return list(self.db.execute(query).scalars().all())
        except SQLAlchemyError as e:
            logger.error(f"products_fetch_error | ids={list(product_ids)} error={e}", exc_info=True)
            raise InternalError("Failed to load products") from e

    def list_products(self, include_inactive: bool = False) -> List[Product]:
        query = select(Product).order_by(Product.created_at.desc(), Product.name)
        if not include_inactive:
            query = query.where(Product.is_active.is_(True))
        return list(self.db.execute(query).scalars().all())

    def add(self, product: Product) -> Product:
        try:
            self.db.add(product)
            self.db.flush()
            return product
        except IntegrityError as e:
            logger.warning(f"product_unique_violation | sku={product.sku} slug={product.slug}")
            raise ConflictError("Product with this slug or SKU already exists") from e
        except SQLAlchemyError as e:
            logger.error(f"product_save_error | sku={product.sku} error={e}", exc_info=True)
            raise InternalError("Failed to save product") from e

    def delete(self, product: Product) -> None:
        self.db.delete(product)
        self.db.flush()

    def count_by_status(self) -> Dict[str, int]:
        rows = self.db.execute(select(Product.is_active, func.count(Product.id)).group_by(Product.is_active)).all()
        counts = {bool(is_active): count for is_active, count in rows}
        active = counts.get(True, 0)
        inactive = counts.get(False, 0)
        return {"total": active + inactive, "active": active, "inactive": inactive}
