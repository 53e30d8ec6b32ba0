import pytest

from app.domain.errors import LockContention


def test_acquire_is_exclusive_until_released(lock_service):
    token = lock_service.acquire("balance_lock:1", 5)

    assert token is not None
    assert lock_service.acquire("balance_lock:1", 5) is None

    assert lock_service.release("balance_lock:1", token) is True
    assert lock_service.acquire("balance_lock:1", 5) is not None


def test_lock_has_ttl(lock_service, redis_client):
    lock_service.acquire("balance_lock:1", 5)

    assert 0 < redis_client.ttl("balance_lock:1") <= 5


def test_release_with_foreign_token_keeps_the_lock(lock_service, redis_client):
    token = lock_service.acquire("balance_lock:1", 5)

    assert lock_service.release("balance_lock:1", "not-the-owner") is False
    assert redis_client.get("balance_lock:1") == token


def test_release_of_missing_key_returns_false(lock_service):
    assert lock_service.release("balance_lock:404", "whatever") is False


def test_hold_raises_on_contention(lock_service):
    lock_service.acquire("balance_lock:1", 5)

    with pytest.raises(LockContention):
        with lock_service.hold("balance_lock:1", 5):
            pass


def test_hold_releases_on_error(lock_service, redis_client):
    with pytest.raises(RuntimeError):
        with lock_service.hold("balance_lock:1", 5):
            assert redis_client.exists("balance_lock:1")
            raise RuntimeError("boom")

    assert not redis_client.exists("balance_lock:1")
