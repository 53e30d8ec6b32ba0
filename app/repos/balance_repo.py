# app/repos/balance_repo.py
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.data.models.balance import BalanceModel


class BalanceRepo:
    """
    Ledger store. Nie commituje - transakcje trzyma serwis.
    """

    def __init__(self, db: Session):
        self.db = db

    def create(self, user_id: int) -> BalanceModel:
        balance = BalanceModel(user_id=user_id, amount=Decimal("0.00"))
        self.db.add(balance)
        self.db.flush()
        return balance

    def get(self, user_id: int) -> BalanceModel | None:
        return self.db.execute(
            select(BalanceModel).where(BalanceModel.user_id == user_id)
        ).scalar_one_or_none()

    def get_for_update(self, user_id: int) -> BalanceModel | None:
        # SELECT ... FOR UPDATE, blokada wiersza do konca transakcji
        return self.db.execute(
            select(BalanceModel)
            .where(BalanceModel.user_id == user_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        ).scalar_one_or_none()

    def set_amount(self, balance: BalanceModel, amount: Decimal) -> BalanceModel:
        balance.amount = amount
        self.db.flush()
        return balance
