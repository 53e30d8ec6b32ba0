# app/repos/order_repo.py
from sqlalchemy import select, update
from sqlalchemy.orm import Session

from app.data.models.order import OrderModel
from app.data.models.order_item import OrderItemModel


class OrderRepo:
    def __init__(self, db: Session):
        self.db = db

    def create_order(self, order: OrderModel) -> OrderModel:
        self.db.add(order)
        self.db.flush()
        return order

    def add_order_item(self, item: OrderItemModel) -> OrderItemModel:
        self.db.add(item)
        self.db.flush()
        return item

    def get_order(self, order_id: int) -> OrderModel | None:
        return self.db.get(OrderModel, order_id)

    def get_user_order(self, order_id: int, user_id: int) -> OrderModel | None:
        return self.db.execute(
            select(OrderModel).where(OrderModel.id == order_id, OrderModel.user_id == user_id)
        ).scalar_one_or_none()

    def list_orders(self, user_id: int | None = None) -> list[OrderModel]:
        stmt = select(OrderModel).order_by(OrderModel.id.desc())
        if user_id:
            stmt = stmt.where(OrderModel.user_id == user_id)
        return list(self.db.execute(stmt).scalars())

    def get_order_items(self, order_id: int) -> list[OrderItemModel]:
        return list(
            self.db.execute(
                select(OrderItemModel)
                .where(OrderItemModel.order_id == order_id)
                .order_by(OrderItemModel.id)
            ).scalars()
        )

    def update_order_status(self, order_id: int, status: str, from_status: str | None = None) -> int:
        """
        Update tylko kolumny status (reszta wiersza bez zmian).
        from_status - warunek na poprzedni stan, zwraca liczbe zmienionych wierszy.
        """
        stmt = update(OrderModel).where(OrderModel.id == order_id)
        if from_status is not None:
            stmt = stmt.where(OrderModel.status == from_status)
        result = self.db.execute(stmt.values(status=status))
        return result.rowcount
