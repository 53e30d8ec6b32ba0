from sqlalchemy import select, func
from sqlalchemy.orm import Session
from app.data.models.user import UserModel

class UserRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_user(self, user_id: int) -> UserModel | None:
        return self.db.get(UserModel, user_id)

    def exists_email(self, email: str) -> bool:
        found = self.db.execute(
            select(UserModel.id).where(func.lower(UserModel.email) == email.lower())
        ).first()
        return found is not None

    def list_users(self, page: int, limit: int) -> list[UserModel]:
        return list(
            self.db.execute(
                select(UserModel).order_by(UserModel.id).offset((page - 1) * limit).limit(limit)
            ).scalars()
        )

    def create_user(self, user: UserModel) -> UserModel:
        self.db.add(user)
        self.db.flush()
        return user
