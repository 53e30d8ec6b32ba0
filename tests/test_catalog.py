from decimal import Decimal

import pytest

from conftest import sqlite_engine
from app.domain.errors import Conflict, NotFound
from app.domain.schemas import CategoryIn, ProductIn
from app.services.cart_service import CartService
from app.services.category_service import CategoryService
from app.services.checkout_service import CheckoutService
from app.services.product_service import ProductService


@pytest.fixture
def engine(tmp_path):
    # usuwanie z katalogu musi trafic na klucze obce jak na postgresie
    engine = sqlite_engine(tmp_path / "catalog.db", foreign_keys=True)
    yield engine
    engine.dispose()


def test_product_crud(db):
    categories = CategoryService(db)
    products = ProductService(db)
    category = categories.create(CategoryIn(name="kuchnia"))

    product = products.create(
        ProductIn(name="Czajnik", description="1.7l", price=Decimal("89.90"), stock=4, category_id=category.id)
    )
    assert products.get(product.id).name == "Czajnik"

    updated = products.update(
        product.id, ProductIn(name="Czajnik", price=Decimal("79.90"), stock=6, category_id=category.id)
    )
    assert updated.price == Decimal("79.90")
    assert updated.stock == 6

    products.delete(product.id)
    with pytest.raises(NotFound):
        products.get(product.id)


def test_product_requires_existing_category(db):
    with pytest.raises(NotFound):
        ProductService(db).create(ProductIn(name="x", price=Decimal("1.00"), stock=1, category_id=99))


def test_product_search_is_case_insensitive(db, make_product):
    make_product(name="Czerwony kubek")
    make_product(name="Talerz")

    assert [p.name for p in ProductService(db).list(1, 10, "KUBEK")] == ["Czerwony kubek"]


def test_category_crud(db):
    svc = CategoryService(db)
    category = svc.create(CategoryIn(name="ogrod"))

    assert svc.update(category.id, CategoryIn(name="ogród")).name == "ogród"
    assert [c.name for c in svc.list(1, 10)] == ["ogród"]

    svc.delete(category.id)
    with pytest.raises(NotFound):
        svc.get(category.id)


def test_ordered_product_cannot_be_deleted(db, make_user, make_product):
    uid = make_user()
    pid = make_product(stock=5)
    CartService(db).add_to_cart(uid, pid, 1)
    CheckoutService(db).checkout(uid, "transfer")

    with pytest.raises(Conflict):
        ProductService(db).delete(pid)

    assert ProductService(db).get(pid).stock == 4


def test_product_in_cart_cannot_be_deleted(db, make_user, make_product):
    uid = make_user()
    pid = make_product()
    CartService(db).add_to_cart(uid, pid, 1)

    with pytest.raises(Conflict):
        ProductService(db).delete(pid)

    assert len(CartService(db).get_cart(uid).items) == 1


def test_category_with_products_cannot_be_deleted(db):
    category = CategoryService(db).create(CategoryIn(name="lazienka"))
    ProductService(db).create(ProductIn(name="Mydlo", price=Decimal("4.99"), stock=1, category_id=category.id))

    with pytest.raises(Conflict):
        CategoryService(db).delete(category.id)

    assert CategoryService(db).get(category.id).name == "lazienka"
