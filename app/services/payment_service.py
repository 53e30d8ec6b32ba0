# app/services/payment_service.py
from contextlib import nullcontext

from sqlalchemy.orm import Session

from app.data.models.order import OrderModel, ORDER_PAID
from app.data.models.outbox import OutboxModel
from app.data.models.payment import (
    PaymentModel,
    PAYMENT_PENDING,
    PAYMENT_COMPLETED,
    METHOD_BALANCE,
)
from app.data.transaction import atomic
from app.domain.errors import NotFound, PaymentNotPayable, Internal
from app.repos.order_repo import OrderRepo
from app.repos.outbox_repo import OutboxRepo
from app.repos.payment_repo import PaymentRepo
from app.services.balance_service import BalanceService
from app.services.lock_service import LockService
from app.services.messaging import MessageBus, QUEUE_UPDATE_ORDER_STATUS
from app.utils.logging import get_logger

logger = get_logger(__name__)


class _CompletedConcurrently(Exception):
    pass


class PaymentService:
    """
    Rozliczenie platnosci (settlement).

    Platnosc oznaczana jako completed razem z wpisem do outboxa w jednej
    transakcji, dopiero potem publikacja eventu. Jesli publikacja padnie,
    relay outboxa wysle event pozniej.
    """

    def __init__(self, db: Session, lock_service: LockService, bus: MessageBus):
        self.db = db
        self.payments = PaymentRepo(db)
        self.orders = OrderRepo(db)
        self.outbox = OutboxRepo(db)
        self.balance_service = BalanceService(db, lock_service)
        self.bus = bus

    def get_payment(self, user_id: int, order_id: int) -> PaymentModel:
        payment = self.payments.get_by_user_and_order(user_id, order_id)
        if payment is None:
            raise NotFound(f"payment for order {order_id} not found")
        return payment

    def make_payment(self, user_id: int, order_id: int) -> None:
        payment = self.get_payment(user_id, order_id)

        if payment.payment_status == PAYMENT_COMPLETED:
            logger.info(f"Payment for order {order_id} already completed")
            return
        if payment.payment_status != PAYMENT_PENDING:
            raise PaymentNotPayable()

        order = self.orders.get_user_order(order_id, user_id)
        if order is None:
            raise NotFound(f"order {order_id} not found")

        by_balance = payment.payment_method == METHOD_BALANCE
        lock = self.balance_service.hold(user_id) if by_balance else nullcontext()

        try:
            with lock:
                outbox_row = self._settle(payment, order, by_balance)
        except _CompletedConcurrently:
            logger.info(f"Payment for order {order_id} completed by a concurrent call")
            return

        logger.info(f"Payment for order {order_id} completed ({payment.payment_method})")

        event = {"order_id": order_id, "status": ORDER_PAID}
        try:
            self.bus.publish(QUEUE_UPDATE_ORDER_STATUS, event)
        except Exception as e:
            logger.error(f"Publishing status of order {order_id} failed, left in outbox {outbox_row.id}: {e}")
            raise Internal("payment completed but the order status event was not published") from e

        self.outbox.mark_sent(outbox_row.id)

    def _settle(self, payment: PaymentModel, order: OrderModel, by_balance: bool) -> OutboxModel:
        with atomic(self.db):
            if by_balance and order.total_price > 0:
                self.balance_service.debit(order.user_id, order.total_price)

            # compare-and-set, reaper albo rownolegle wywolanie moglo byc pierwsze
            if not self.payments.transition_status(payment.id, PAYMENT_PENDING, PAYMENT_COMPLETED):
                current = self.payments.get_by_user_and_order(order.user_id, order.id)
                if current is not None and current.payment_status == PAYMENT_COMPLETED:
                    # rollback cofa obciazenie salda
                    raise _CompletedConcurrently()
                raise PaymentNotPayable()

            return self.outbox.add(QUEUE_UPDATE_ORDER_STATUS, {"order_id": order.id, "status": ORDER_PAID})
