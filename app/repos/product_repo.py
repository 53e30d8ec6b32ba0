# app/repos/product_repo.py
from sqlalchemy import select, update, func
from sqlalchemy.orm import Session

from app.data.models.product import ProductModel


class ProductRepo:
    def __init__(self, db: Session):
        self.db = db

    def get(self, product_id: int) -> ProductModel | None:
        return self.db.get(ProductModel, product_id)

    def get_many(self, product_ids) -> dict[int, ProductModel]:
        ids = list(set(product_ids))
        if not ids:
            return {}
        rows = self.db.execute(select(ProductModel).where(ProductModel.id.in_(ids))).scalars()
        return {p.id: p for p in rows}

    def list(self, page: int, page_size: int, search: str | None = None) -> list[ProductModel]:
        stmt = select(ProductModel)
        if search:
            stmt = stmt.where(func.lower(ProductModel.name).contains(search.lower()))
        stmt = stmt.order_by(ProductModel.id).offset((page - 1) * page_size).limit(page_size)
        return list(self.db.execute(stmt).scalars())

    def create(self, product: ProductModel) -> ProductModel:
        self.db.add(product)
        self.db.flush()
        return product

    def update(self, product: ProductModel) -> ProductModel:
        self.db.flush()
        return product

    def delete(self, product: ProductModel):
        self.db.delete(product)
        self.db.flush()

    def decrement_stock(self, product_id: int, quantity: int) -> bool:
        """
        Warunkowy update: UPDATE products SET stock = stock - :q WHERE id = :id AND stock >= :q.
        0 wierszy = za malo towaru (ktos kupil wczesniej).
        """
        result = self.db.execute(
            update(ProductModel)
            .where(ProductModel.id == product_id, ProductModel.stock >= quantity)
            .values(stock=ProductModel.stock - quantity)
        )
        return result.rowcount == 1

    def increment_stock(self, product_id: int, quantity: int) -> bool:
        result = self.db.execute(
            update(ProductModel)
            .where(ProductModel.id == product_id)
            .values(stock=ProductModel.stock + quantity)
        )
        return result.rowcount == 1
