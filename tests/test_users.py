from decimal import Decimal

import pytest

from conftest import balance_of
from app.domain.errors import NotFound, ValidationError
from app.domain.schemas import UserCreate, UserUpdate
from app.services.user_service import UserService


def test_register_creates_zero_balance(db, session_factory, cache_service):
    user = UserService(db, cache_service).register(UserCreate(name="Ala", email="ala@example.com"))

    assert user.id > 0
    assert balance_of(session_factory, user.id) == Decimal("0.00")


def test_email_must_be_unique(db, cache_service):
    svc = UserService(db, cache_service)
    svc.register(UserCreate(name="Ala", email="ala@example.com"))

    with pytest.raises(ValidationError):
        svc.register(UserCreate(name="Ola", email="ALA@example.com"))


def test_get_user_is_cached(db, cache_service, redis_client):
    svc = UserService(db, cache_service)
    user = svc.register(UserCreate(name="Ala", email="ala@example.com"))

    assert svc.get_user(user.id) == user
    assert redis_client.exists(f"user:{user.id}")
    assert svc.get_user(user.id) == user


def test_get_missing_user(db, cache_service):
    with pytest.raises(NotFound):
        UserService(db, cache_service).get_user(404)


def test_update_invalidates_cache(db, cache_service, redis_client):
    svc = UserService(db, cache_service)
    user = svc.register(UserCreate(name="Ala", email="ala@example.com"))
    svc.get_user(user.id)
    svc.list_users(1, 10)

    updated = svc.update_user(user.id, UserUpdate(name="Alicja"))

    assert updated.name == "Alicja"
    assert not redis_client.exists(f"user:{user.id}")
    assert not redis_client.exists("users:1:10")
    assert svc.get_user(user.id).name == "Alicja"


def test_update_without_changes(db, cache_service):
    svc = UserService(db, cache_service)
    user = svc.register(UserCreate(name="Ala", email="ala@example.com"))

    with pytest.raises(ValidationError):
        svc.update_user(user.id, UserUpdate(name="Ala"))


def test_list_users_pages(db, cache_service):
    svc = UserService(db, cache_service)
    for i in range(3):
        svc.register(UserCreate(name=f"u{i}", email=f"u{i}@example.com"))

    assert [u.name for u in svc.list_users(1, 2)] == ["u0", "u1"]
    assert [u.name for u in svc.list_users(2, 2)] == ["u2"]
