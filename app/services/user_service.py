from sqlalchemy.orm import Session
from app.data.models.user import UserModel
from app.data.transaction import atomic
from app.domain.errors import ValidationError, NotFound
from app.domain.schemas import UserCreate, UserRead, UserUpdate
from app.repos.balance_repo import BalanceRepo
from app.repos.user_repo import UserRepo
from app.services.cache_service import CacheService, cache_key
from app.utils.settings import CACHE_TTL_SECONDS
from app.utils.logging import get_logger

logger = get_logger(__name__)


class UserService:
    def __init__(self, db: Session, cache: CacheService):
        self.db = db
        self.repo = UserRepo(db)
        self.balances = BalanceRepo(db)
        self.cache = cache

    def register(self, payload: UserCreate) -> UserRead:
        if self.repo.exists_email(payload.email):
            raise ValidationError("email already registered")

        #uzytkownik i jego saldo (0) w jednej transakcji
        with atomic(self.db):
            user = self.repo.create_user(UserModel(name=payload.name, email=payload.email))
            self.balances.create(user.id)

        self.cache.delete_by_prefix("users:")
        logger.info(f"Registered user {user.id}")
        return UserRead.model_validate(user)

    def get_user(self, user_id: int) -> UserRead:
        key = cache_key("user", user_id)
        cached = self.cache.get(key)
        if cached is not None:
            return UserRead.model_validate(cached)

        user = self.repo.get_user(user_id)
        if not user:
            raise NotFound("user not found")

        result = UserRead.model_validate(user)
        self.cache.set(key, result.model_dump(), CACHE_TTL_SECONDS)
        return result

    def list_users(self, page: int, limit: int) -> list[UserRead]:
        key = cache_key("users", page, limit)
        cached = self.cache.get(key)
        if cached is not None:
            return [UserRead.model_validate(u) for u in cached]

        users = [UserRead.model_validate(u) for u in self.repo.list_users(page, limit)]
        self.cache.set(key, [u.model_dump() for u in users], CACHE_TTL_SECONDS)
        return users

    def update_user(self, user_id: int, payload: UserUpdate) -> UserRead:
        user = self.repo.get_user(user_id)
        if not user:
            raise NotFound("user not found")

        changes = payload.model_dump(exclude_none=True)
        if not changes or all(getattr(user, k) == v for k, v in changes.items()):
            raise ValidationError("no data to update")
        if "email" in changes and changes["email"] != user.email and self.repo.exists_email(changes["email"]):
            raise ValidationError("email already registered")

        with atomic(self.db):
            for field, value in changes.items():
                setattr(user, field, value)

        self._invalidate(user_id)
        return UserRead.model_validate(user)

    def _invalidate(self, user_id: int):
        self.cache.delete(cache_key("user", user_id))
        self.cache.delete_by_prefix("users:")
