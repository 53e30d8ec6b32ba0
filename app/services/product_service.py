# app/services/product_service.py
from sqlalchemy.orm import Session

from app.data.models.product import ProductModel
from app.data.transaction import atomic
from app.domain.errors import Conflict, NotFound
from app.domain.schemas import ProductIn
from app.repos.category_repo import CategoryRepo
from app.repos.product_repo import ProductRepo
from app.utils.logging import get_logger

logger = get_logger(__name__)


class ProductService:
    def __init__(self, db: Session):
        self.db = db
        self.repo = ProductRepo(db)
        self.categories = CategoryRepo(db)

    def _check_category(self, category_id: int | None):
        if category_id is not None and self.categories.get(category_id) is None:
            raise NotFound(f"category {category_id} not found")

    def create(self, data: ProductIn) -> ProductModel:
        self._check_category(data.category_id)
        with atomic(self.db):
            product = self.repo.create(ProductModel(**data.model_dump()))
        logger.info(f"Created product {product.id}")
        return product

    def get(self, product_id: int) -> ProductModel:
        product = self.repo.get(product_id)
        if product is None:
            raise NotFound(f"product {product_id} not found")
        return product

    def list(self, page: int, page_size: int, search: str | None = None) -> list[ProductModel]:
        return self.repo.list(page, page_size, search)

    def update(self, product_id: int, data: ProductIn) -> ProductModel:
        product = self.get(product_id)
        self._check_category(data.category_id)
        with atomic(self.db):
            for field, value in data.model_dump().items():
                setattr(product, field, value)
            self.repo.update(product)
        return product

    def delete(self, product_id: int):
        product = self.get(product_id)
        try:
            with atomic(self.db):
                self.repo.delete(product)
        except Conflict:
            raise Conflict(f"product {product_id} is referenced by carts or orders")
        logger.info(f"Deleted product {product_id}")
