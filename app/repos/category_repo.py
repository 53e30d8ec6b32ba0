# app/repos/category_repo.py
from sqlalchemy import select
from sqlalchemy.orm import Session

from app.data.models.category import CategoryModel


class CategoryRepo:
    def __init__(self, db: Session):
        self.db = db

    def get(self, category_id: int) -> CategoryModel | None:
        return self.db.get(CategoryModel, category_id)

    def list(self, page: int, page_size: int) -> list[CategoryModel]:
        stmt = (
            select(CategoryModel)
            .order_by(CategoryModel.id)
            .offset((page - 1) * page_size)
            .limit(page_size)
        )
        return list(self.db.execute(stmt).scalars())

    def create(self, category: CategoryModel) -> CategoryModel:
        self.db.add(category)
        self.db.flush()
        return category

    def update(self, category: CategoryModel) -> CategoryModel:
        self.db.flush()
        return category

    def delete(self, category: CategoryModel):
        self.db.delete(category)
        self.db.flush()
