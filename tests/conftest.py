import itertools
from decimal import Decimal

import fakeredis
import pytest
from sqlalchemy import create_engine, event, select
from sqlalchemy.orm import sessionmaker

from app.data import models  # noqa: F401
from app.data.database import Base
from app.data.models.balance import BalanceModel
from app.data.models.product import ProductModel
from app.data.models.user import UserModel
from app.services.cache_service import CacheService
from app.services.lock_service import LockService

_emails = itertools.count(1)


class RecordingBus:
    """Stands in for the broker; keeps everything that was published."""

    def __init__(self):
        self.published = []
        self.closed = False

    def publish(self, queue_name, payload):
        self.published.append((queue_name, payload))

    def close(self):
        self.closed = True


class FailingBus(RecordingBus):
    def publish(self, queue_name, payload):
        raise ConnectionError("broker unreachable")


def sqlite_engine(path, foreign_keys=False):
    # plik zamiast :memory:, testy wspolbieznosci uzywaja wielu polaczen
    engine = create_engine(
        f"sqlite:///{path}",
        connect_args={"check_same_thread": False, "timeout": 30},
    )
    if foreign_keys:
        # SQLite domyslnie nie sprawdza kluczy obcych
        @event.listens_for(engine, "connect")
        def _enable_foreign_keys(dbapi_connection, _):
            dbapi_connection.execute("PRAGMA foreign_keys=ON")

    Base.metadata.create_all(engine)
    return engine


@pytest.fixture
def engine(tmp_path):
    engine = sqlite_engine(tmp_path / "shop.db")
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


@pytest.fixture
def db(session_factory):
    with session_factory() as session:
        yield session


@pytest.fixture
def redis_client():
    return fakeredis.FakeRedis(server=fakeredis.FakeServer(), decode_responses=True)


@pytest.fixture
def lock_service(redis_client):
    return LockService(client=redis_client)


@pytest.fixture
def cache_service(redis_client):
    return CacheService(client=redis_client)


@pytest.fixture
def bus():
    return RecordingBus()


@pytest.fixture
def make_user(session_factory):
    def _make(amount="0.00", name="user"):
        with session_factory() as s:
            user = UserModel(name=name, email=f"{name}{next(_emails)}@example.com")
            s.add(user)
            s.flush()
            s.add(BalanceModel(user_id=user.id, amount=Decimal(amount)))
            s.commit()
            return user.id

    return _make


@pytest.fixture
def make_product(session_factory):
    def _make(price="10.00", stock=10, name="product"):
        with session_factory() as s:
            product = ProductModel(name=name, price=Decimal(price), stock=stock)
            s.add(product)
            s.commit()
            return product.id

    return _make


def balance_of(session_factory, user_id):
    with session_factory() as s:
        return s.execute(select(BalanceModel.amount).where(BalanceModel.user_id == user_id)).scalar_one()


def stock_of(session_factory, product_id):
    with session_factory() as s:
        return s.get(ProductModel, product_id).stock
