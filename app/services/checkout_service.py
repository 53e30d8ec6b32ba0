# app/services/checkout_service.py
from datetime import datetime, timezone, timedelta
from decimal import Decimal

from sqlalchemy.orm import Session

from app.data.models.order import OrderModel, ORDER_PENDING
from app.data.models.order_item import OrderItemModel
from app.data.models.payment import PaymentModel, PAYMENT_PENDING, METHOD_BALANCE, METHOD_TRANSFER
from app.data.transaction import atomic
from app.domain.errors import ValidationError, InsufficientStock, EmptyCart, NotFound
from app.domain.schemas import CheckoutOut
from app.repos.cart_repo import CartRepo
from app.repos.order_repo import OrderRepo
from app.repos.payment_repo import PaymentRepo
from app.repos.product_repo import ProductRepo
from app.utils.settings import PAYMENT_TTL_SECONDS
from app.utils.logging import get_logger

logger = get_logger(__name__)

PAYMENT_METHODS = (METHOD_BALANCE, METHOD_TRANSFER)


class CheckoutService:
    """
    Zamiana koszyka na zamowienie + oczekujaca platnosc.

    Zamowienie, pozycje, zdjecie ze stanu, platnosc i wyczyszczenie koszyka
    ida w jednej transakcji. Zdjecie ze stanu to warunkowy update
    (stock >= qty), wiec dwa rownolegle checkouty nie sprzedadza wiecej niz jest.
    """

    def __init__(self, db: Session, payment_ttl: int = PAYMENT_TTL_SECONDS):
        self.db = db
        self.carts = CartRepo(db)
        self.products = ProductRepo(db)
        self.orders = OrderRepo(db)
        self.payments = PaymentRepo(db)
        self.payment_ttl = payment_ttl

    def checkout(self, user_id: int, payment_method: str) -> CheckoutOut:
        if payment_method not in PAYMENT_METHODS:
            raise ValidationError(f"unsupported payment method: {payment_method}")

        with atomic(self.db):
            cart = self.carts.get_cart_by_user(user_id, for_update=True)
            if not cart:
                raise EmptyCart()

            items = self.carts.get_cart_items(cart.id)
            if not items:
                raise EmptyCart()

            # walidacja na biezacym odczycie, ceny z tej chwili ida do order items
            prices = {}
            total = Decimal("0.00")
            for item in items:
                product = self.products.get(item.product_id)
                if product is None:
                    raise NotFound(f"product {item.product_id} not found")
                if product.stock < item.quantity:
                    raise InsufficientStock(f"insufficient stock for product {item.product_id}")
                prices[item.product_id] = product.price
                total += product.price * item.quantity

            now = datetime.now(timezone.utc)
            order = self.orders.create_order(
                OrderModel(
                    user_id=user_id,
                    total_price=total,
                    status=ORDER_PENDING,
                    created_at=now,
                )
            )

            for item in items:
                self.orders.add_order_item(
                    OrderItemModel(
                        order_id=order.id,
                        product_id=item.product_id,
                        quantity=item.quantity,
                        price=prices[item.product_id],
                    )
                )
                if not self.products.decrement_stock(item.product_id, item.quantity):
                    # ktos inny zdjal towar miedzy sprawdzeniem a zapisem
                    logger.warning(f"Stock of product {item.product_id} taken by a concurrent checkout")
                    raise InsufficientStock(f"insufficient stock for product {item.product_id}")

            self.payments.create_payment(
                PaymentModel(
                    order_id=order.id,
                    payment_method=payment_method,
                    payment_status=PAYMENT_PENDING,
                    created_at=now,
                    updated_at=now,
                    expired_at=now + timedelta(seconds=self.payment_ttl),
                )
            )

            if not self.carts.delete_cart(cart):
                # rownolegly checkout tego samego koszyka byl pierwszy
                logger.warning(f"Cart {cart.id} of user {user_id} already checked out")
                raise EmptyCart()

        logger.info(f"Checkout of user {user_id}: order {order.id}, total {total}, method {payment_method}")

        return CheckoutOut(order_id=order.id, payment_method=payment_method, total=total)
