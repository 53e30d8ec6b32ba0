# app/services/category_service.py
from sqlalchemy.orm import Session

from app.data.models.category import CategoryModel
from app.data.transaction import atomic
from app.domain.errors import Conflict, NotFound
from app.domain.schemas import CategoryIn
from app.repos.category_repo import CategoryRepo


class CategoryService:
    def __init__(self, db: Session):
        self.db = db
        self.repo = CategoryRepo(db)

    def create(self, data: CategoryIn) -> CategoryModel:
        with atomic(self.db):
            return self.repo.create(CategoryModel(name=data.name))

    def get(self, category_id: int) -> CategoryModel:
        category = self.repo.get(category_id)
        if category is None:
            raise NotFound(f"category {category_id} not found")
        return category

    def list(self, page: int, page_size: int) -> list[CategoryModel]:
        return self.repo.list(page, page_size)

    def update(self, category_id: int, data: CategoryIn) -> CategoryModel:
        category = self.get(category_id)
        with atomic(self.db):
            category.name = data.name
            self.repo.update(category)
        return category

    def delete(self, category_id: int):
        category = self.get(category_id)
        try:
            with atomic(self.db):
                self.repo.delete(category)
        except Conflict:
            raise Conflict(f"category {category_id} still has products")
