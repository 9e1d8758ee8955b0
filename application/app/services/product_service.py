from typing import List, Optional

from sqlalchemy.orm import sessionmaker

from app.connections.database import get_db_session
from app.core.constants import ErrorCode
from app.core.exceptions import ConflictError, NotFoundError
from app.dto.products import ProductCreate, ProductResponse, ProductUpdate
from app.models.products import Product
from app.repository.products import ProductsRepository

# Logger
from app.logging.utils import get_app_logger
logger = get_app_logger("app.services.product_service")


class ProductService:
    """Catalog management with slug/SKU uniqueness"""

    def __init__(self, session_factory: Optional[sessionmaker] = None):
        self.session_factory = session_factory

    def _get_or_raise(self, repository: ProductsRepository, product_id: str) -> Product:
        product = repository.get_by_id(product_id)
        if product is None:
            raise NotFoundError(f"Product {product_id} not found")
        return product

    def _check_unique(self, repository: ProductsRepository, slug: Optional[str], sku: Optional[str], exclude_id: Optional[str] = None):
        errors = []
        if slug:
            existing = repository.find_by_slug(slug)
            if existing is not None and existing.id != exclude_id:
                errors.append({"code": ErrorCode.DUPLICATE_SLUG, "field": "slug", "message": f"Slug '{slug}' is already in use"})
        if sku:
            existing = repository.find_by_sku(sku)
            if existing is not None and existing.id != exclude_id:
                errors.append({"code": ErrorCode.DUPLICATE_SKU, "field": "sku", "message": f"SKU '{sku}' is already in use"})
        if errors:
            logger.warning(f"product_conflict | slug={slug} sku={sku}")
            raise ConflictError("Product already exists", errors=errors)

    async def create_product(self, data: ProductCreate) -> ProductResponse:
        with get_db_session(self.session_factory) as db:
            repository = ProductsRepository(db)
            self._check_unique(repository, data.slug, data.sku)
            product = repository.add(Product(**data.model_dump()))
            logger.info(f"product_created | product_id={product.id} sku={product.sku}")
            return ProductResponse.model_validate(product)

    async def get_product(self, product_id: str) -> ProductResponse:
        with get_db_session(self.session_factory, read_only=True) as db:
            return ProductResponse.model_validate(self._get_or_raise(ProductsRepository(db), product_id))

    async def list_products(self, include_inactive: bool = False) -> List[ProductResponse]:
        with get_db_session(self.session_factory, read_only=True) as db:
            return [ProductResponse.model_validate(p) for p in ProductsRepository(db).list_products(include_inactive)]

    async def update_product(self, product_id: str, data: ProductUpdate) -> ProductResponse:
        changes = data.model_dump(exclude_unset=True)
        with get_db_session(self.session_factory) as db:
            repository = ProductsRepository(db)
            product = self._get_or_raise(repository, product_id)
            self._check_unique(repository, changes.get("slug"), changes.get("sku"), exclude_id=product.id)
            for key, value in changes.items():
                setattr(product, key, value)
            db.flush()
            logger.info(f"product_updated | product_id={product_id} fields={sorted(changes)}")
            return ProductResponse.model_validate(product)

    async def toggle_product(self, product_id: str, is_active: bool) -> ProductResponse:
        with get_db_session(self.session_factory) as db:
            product = self._get_or_raise(ProductsRepository(db), product_id)
            product.is_active = is_active
            db.flush()
            logger.info(f"product_toggled | product_id={product_id} is_active={is_active}")
            return ProductResponse.model_validate(product)

    async def delete_product(self, product_id: str) -> None:
        with get_db_session(self.session_factory) as db:
            repository = ProductsRepository(db)
            repository.delete(self._get_or_raise(repository, product_id))
            logger.info(f"product_deleted | product_id={product_id}")
