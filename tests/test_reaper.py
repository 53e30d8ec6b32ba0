from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy.exc import OperationalError

from conftest import stock_of
from app.repos.order_repo import OrderRepo
from app.repos.payment_repo import PaymentRepo
from app.repos.product_repo import ProductRepo
from app.services.cart_service import CartService
from app.services.checkout_service import CheckoutService
from app.services.payment_service import PaymentService
from app.tasks.expire import PaymentReaper


@pytest.fixture
def reaper(session_factory):
    # SQLite serializuje zapisy, jeden worker wystarczy
    return PaymentReaper(session_factory, max_workers=1)


@pytest.fixture
def pending_order(db, make_user, make_product):
    uid = make_user(amount="100.00")
    pid = make_product(price="10.00", stock=5)
    CartService(db).add_to_cart(uid, pid, 2)
    order_id = CheckoutService(db).checkout(uid, "balance").order_id
    return uid, pid, order_id


def _state(session_factory, order_id):
    with session_factory() as s:
        return (
            PaymentRepo(s).get_by_order(order_id).payment_status,
            OrderRepo(s).get_order(order_id).status,
        )


def test_expired_payment_is_cancelled_and_restocked(session_factory, reaper, pending_order):
    _, pid, order_id = pending_order
    assert stock_of(session_factory, pid) == 3

    later = datetime.now(timezone.utc) + timedelta(minutes=11)

    assert reaper.run_once(later) == 1
    assert _state(session_factory, order_id) == ("failed", "cancelled")
    assert stock_of(session_factory, pid) == 5


def test_second_tick_does_not_restock_again(session_factory, reaper, pending_order):
    _, pid, order_id = pending_order
    later = datetime.now(timezone.utc) + timedelta(minutes=11)

    reaper.run_once(later)
    assert reaper.run_once(later) == 0

    with session_factory() as s:
        payment_id = PaymentRepo(s).get_by_order(order_id).id
    assert reaper.expire_payment(payment_id) is False

    assert stock_of(session_factory, pid) == 5


def test_payment_within_deadline_is_left_alone(session_factory, reaper, pending_order):
    _, pid, order_id = pending_order

    assert reaper.run_once(datetime.now(timezone.utc) + timedelta(minutes=9)) == 0
    assert _state(session_factory, order_id) == ("pending", "pending")
    assert stock_of(session_factory, pid) == 3


def test_completed_payment_is_never_expired(db, session_factory, reaper, lock_service, bus, pending_order):
    uid, pid, order_id = pending_order
    PaymentService(db, lock_service, bus).make_payment(uid, order_id)

    assert reaper.run_once(datetime.now(timezone.utc) + timedelta(minutes=11)) == 0
    assert _state(session_factory, order_id)[0] == "completed"
    assert stock_of(session_factory, pid) == 3


def test_reaper_fans_out_over_many_payments(db, session_factory, make_user, make_product):
    pid = make_product(price="1.00", stock=10)
    orders = []
    for _ in range(3):
        uid = make_user()
        CartService(db).add_to_cart(uid, pid, 1)
        orders.append(CheckoutService(db).checkout(uid, "transfer").order_id)

    reaper = PaymentReaper(session_factory, max_workers=2)

    assert reaper.run_once(datetime.now(timezone.utc) + timedelta(minutes=11)) == 3
    assert stock_of(session_factory, pid) == 10
    assert all(_state(session_factory, o) == ("failed", "cancelled") for o in orders)


def test_failed_restock_of_one_item_does_not_stop_the_rest(db, session_factory, reaper, make_user, make_product, monkeypatch):
    uid = make_user()
    broken = make_product(stock=5, name="zepsuty")
    fine = make_product(stock=5, name="dobry")
    CartService(db).add_to_cart(uid, broken, 2)
    CartService(db).add_to_cart(uid, fine, 3)
    order_id = CheckoutService(db).checkout(uid, "transfer").order_id

    original = ProductRepo.increment_stock

    def increment_or_fail(self, product_id, quantity):
        if product_id == broken:
            raise OperationalError("UPDATE products", {}, Exception("database is locked"))
        return original(self, product_id, quantity)

    monkeypatch.setattr(ProductRepo, "increment_stock", increment_or_fail)

    assert reaper.run_once(datetime.now(timezone.utc) + timedelta(minutes=11)) == 1
    assert stock_of(session_factory, broken) == 3
    assert stock_of(session_factory, fine) == 5
    assert _state(session_factory, order_id) == ("failed", "cancelled")
