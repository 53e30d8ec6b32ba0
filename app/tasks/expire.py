# app/tasks/expire.py
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timezone

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from app.celery_worker import celery_app
from app.data.database import SessionLocal
from app.data.models.order import ORDER_PENDING, ORDER_CANCELLED
from app.data.models.payment import PAYMENT_PENDING, PAYMENT_FAILED
from app.repos.order_repo import OrderRepo
from app.repos.payment_repo import PaymentRepo
from app.repos.product_repo import ProductRepo
from app.utils.settings import REAPER_MAX_WORKERS
from app.utils.logging import get_logger

logger = get_logger(__name__)


class PaymentReaper:
    """
    Anuluje platnosci po terminie: payment -> failed, zwrot towaru na stan,
    order -> cancelled.

    Kazdy krok best-effort (blad logowany, reszta leci dalej). Platnosc jest
    najpierw przejmowana warunkowym update (pending -> failed), wiec drugi
    przebieg po tej samej platnosci nic nie robi i nie dokłada towaru drugi raz.
    """

    def __init__(self, session_factory: sessionmaker = SessionLocal, max_workers: int = REAPER_MAX_WORKERS):
        self.session_factory = session_factory
        self.max_workers = max_workers

    def run_once(self, now: datetime | None = None) -> int:
        now = now or datetime.now(timezone.utc)

        with self.session_factory() as db:
            payment_ids = PaymentRepo(db).find_expired_ids(now)

        logger.info(f"Found {len(payment_ids)} expired payments")
        if not payment_ids:
            return 0

        # ograniczona pula, tick czeka na wszystkie zadania
        with ThreadPoolExecutor(max_workers=self.max_workers, thread_name_prefix="reaper") as pool:
            results = list(pool.map(self._expire_safely, payment_ids))

        cancelled = sum(1 for r in results if r)
        logger.info(f"Cancelled {cancelled} of {len(payment_ids)} expired payments")
        return cancelled

    def _expire_safely(self, payment_id: int) -> bool:
        try:
            return self.expire_payment(payment_id)
        except Exception as e:
            logger.error(f"Error processing expired payment {payment_id}: {e}")
            return False

    def expire_payment(self, payment_id: int) -> bool:
        """Returns False when the payment was no longer pending (someone else won)."""
        with self.session_factory() as db:
            payments = PaymentRepo(db)
            orders = OrderRepo(db)
            products = ProductRepo(db)

            payment = payments.get_payment(payment_id)
            if payment is None:
                logger.warning(f"Payment {payment_id} disappeared")
                return False

            #pierwszy zapis wygrywa
            claimed = payments.transition_status(payment_id, PAYMENT_PENDING, PAYMENT_FAILED)
            db.commit()
            if not claimed:
                logger.info(f"Payment {payment_id} is no longer pending, skipping")
                return False

            logger.info(f"Cancelling payment {payment_id} for order {payment.order_id}")

            try:
                items = orders.get_order_items(payment.order_id)
            except SQLAlchemyError as e:
                logger.error(f"Error finding items of order {payment.order_id}: {e}")
                db.rollback()
                items = []

            for item in items:
                try:
                    if not products.increment_stock(item.product_id, item.quantity):
                        logger.error(f"Product {item.product_id} not found, stock not restored")
                    db.commit()
                except SQLAlchemyError as e:
                    db.rollback()
                    logger.error(f"Error restoring stock of product {item.product_id}: {e}")

            try:
                orders.update_order_status(payment.order_id, ORDER_CANCELLED, from_status=ORDER_PENDING)
                db.commit()
            except SQLAlchemyError as e:
                db.rollback()
                logger.error(f"Error cancelling order {payment.order_id}: {e}")

        return True


@celery_app.task(name="app.tasks.expire.expire_payments_task")
def expire_payments_task():
    logger.info("Expire payments task started")
    return PaymentReaper().run_once()
