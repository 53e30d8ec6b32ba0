# app/api/deps.py
from functools import lru_cache

from fastapi import Request

from app.services.cache_service import CacheService
from app.services.lock_service import LockService
from app.services.messaging import MessageBus


@lru_cache
def get_lock_service() -> LockService:
    return LockService()


@lru_cache
def get_cache_service() -> CacheService:
    return CacheService()


def get_message_bus(request: Request) -> MessageBus:
    # polaczenie tworzone raz przy starcie aplikacji (lifespan)
    return request.app.state.message_bus
