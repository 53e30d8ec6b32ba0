# app/repos/payment_repo.py
from datetime import datetime, timezone

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from app.data.models.order import OrderModel
from app.data.models.payment import PaymentModel, PAYMENT_PENDING


class PaymentRepo:
    def __init__(self, db: Session):
        self.db = db

    def create_payment(self, payment: PaymentModel) -> PaymentModel:
        self.db.add(payment)
        self.db.flush()
        return payment

    def get_payment(self, payment_id: int) -> PaymentModel | None:
        return self.db.get(PaymentModel, payment_id)

    def get_by_user_and_order(self, user_id: int, order_id: int) -> PaymentModel | None:
        return self.db.execute(
            select(PaymentModel)
            .join(OrderModel, OrderModel.id == PaymentModel.order_id)
            .where(PaymentModel.order_id == order_id, OrderModel.user_id == user_id)
            .execution_options(populate_existing=True)
        ).scalar_one_or_none()

    def get_by_order(self, order_id: int) -> PaymentModel | None:
        return self.db.execute(
            select(PaymentModel).where(PaymentModel.order_id == order_id)
        ).scalar_one_or_none()

    def find_expired_ids(self, now: datetime) -> list[int]:
        return list(
            self.db.execute(
                select(PaymentModel.id)
                .where(
                    PaymentModel.payment_status == PAYMENT_PENDING,
                    PaymentModel.expired_at < now,
                )
                .order_by(PaymentModel.id)
            ).scalars()
        )

    def transition_status(self, payment_id: int, from_status: str, to_status: str) -> bool:
        """
        Warunkowa zmiana statusu (compare-and-set). Wygrywa pierwszy zapis,
        drugi dostaje False i nic nie rusza.
        """
        result = self.db.execute(
            update(PaymentModel)
            .where(PaymentModel.id == payment_id, PaymentModel.payment_status == from_status)
            .values(payment_status=to_status, updated_at=datetime.now(timezone.utc))
        )
        return result.rowcount == 1
