import uuid
from contextlib import contextmanager

import redis
from redis.exceptions import RedisError

from app.domain.errors import LockContention
from app.utils.retry import redis_retry
from app.utils.settings import REDIS_URL
from app.utils.logging import get_logger

logger = get_logger(__name__)

#LUA porownaj i usun, atomicity
_RELEASE_LUA = """
if redis.call('GET', KEYS[1]) == ARGV[1] then
    return redis.call('DEL', KEYS[1])
else
    return 0
end
"""

#redis wykonuje atomowo przez lua, skrypt dziala jako jedna nieprzerywalna operacja
#nie mozna wcisnac sie miedzy GET a DEL, wiec tu jest get + porownanie + del wszystko naraz


class LockService:
    """
    -krotkie locki na kluczu (SET NX EX), bez czekania w kolejce
    -zwalnianie locka tylko przez wlasciciela (token)
    -atomowosc przy pomocy lua
    """

    def __init__(self, url: str | None = None, client: redis.Redis | None = None):
        self.redis = client or redis.Redis.from_url(
            url or REDIS_URL,
            decode_responses=True,
        )

    @redis_retry()
    def acquire(self, key: str, ttl: int) -> str | None:
        """Returns the owner token, or None when somebody else holds the key."""
        token = uuid.uuid4().hex
        #SET balance_lock:1 "<token>" NX EX 5
        acquired = self.redis.set(
            name=key,
            value=token,
            nx=True, #not eXists, jak klucz jest to nic nie rob i zwroc None
            ex=ttl, #Expire, lock padnietego procesu sam wygasa
        )
        if not acquired:
            logger.info(f"Lock {key} is held by another operation")
            return None
        logger.debug(f"Acquired lock {key}")
        return token

    @redis_retry()
    def release(self, key: str, token: str) -> bool:
        """False means the key was no longer ours (expired or taken over)."""
        res = self.redis.eval(_RELEASE_LUA, 1, key, token)
        logger.debug(f"Released lock {key}: {bool(res)}")
        return bool(res)

    @contextmanager
    def hold(self, key: str, ttl: int):
        token = self.acquire(key, ttl)
        if token is None:
            raise LockContention()
        try:
            yield token
        finally:
            try:
                if not self.release(key, token):
                    logger.warning(f"Lock {key} expired before release")
            except RedisError as e:
                # klucz i tak wygasnie po ttl
                logger.error(f"Failed to release lock {key}: {e}")
