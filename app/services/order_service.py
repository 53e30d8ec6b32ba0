# app/services/order_service.py
from sqlalchemy.orm import Session

from app.data.models.order import OrderModel, ORDER_PENDING, ORDER_PAID
from app.data.transaction import atomic
from app.domain.errors import ValidationError, NotFound
from app.domain.schemas import OrderDetailOut, OrderItemOut, OrderOut, PaymentOut
from app.repos.order_repo import OrderRepo
from app.repos.payment_repo import PaymentRepo
from app.utils.logging import get_logger

logger = get_logger(__name__)

# dozwolone przejscia: status docelowy -> status z ktorego wolno przejsc
_TRANSITIONS = {
    ORDER_PAID: ORDER_PENDING,
}


class OrderService:
    """
    Serwis odpowiedzialny za domenę zamówień.
    """

    def __init__(self, db: Session):
        self.db = db
        self.repo = OrderRepo(db)
        self.payments = PaymentRepo(db)

    def update_status_order(self, order_id: int, status: str) -> bool:
        """
        Column-scoped status change driven by the order status event.

        Returns True when the row changed. A duplicate delivery (order already in
        ``status``) is a no-op; terminal orders are never moved.
        """
        from_status = _TRANSITIONS.get(status)
        if from_status is None:
            raise ValidationError(f"unsupported order status: {status}")

        with atomic(self.db):
            order = self.repo.get_order(order_id)
            if order is None:
                raise NotFound(f"order {order_id} not found")

            changed = self.repo.update_order_status(order_id, status, from_status=from_status)

        if changed:
            logger.info(f"Order {order_id}: {from_status} -> {status}")
        elif order.status == status:
            logger.info(f"Order {order_id} already {status}, duplicate event ignored")
        else:
            logger.warning(f"Order {order_id} is {order.status}, cannot move to {status}")
        return bool(changed)

    def get_order(self, order_id: int, user_id: int) -> OrderDetailOut:
        order = self.repo.get_user_order(order_id, user_id)

        if not order:
            raise NotFound(f"order {order_id} not found")

        items = self.repo.get_order_items(order.id)
        payment = self.payments.get_by_order(order.id)

        return OrderDetailOut(
            **OrderOut.model_validate(order).model_dump(),
            items=[OrderItemOut.model_validate(i) for i in items],
            payment=PaymentOut.model_validate(payment) if payment else None,
        )

    def list_orders(self, user_id: int) -> list[OrderModel]:
        return self.repo.list_orders(user_id)
