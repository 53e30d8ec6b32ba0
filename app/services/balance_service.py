# app/services/balance_service.py
from contextlib import contextmanager, ExitStack
from decimal import Decimal, InvalidOperation

from sqlalchemy.orm import Session

from app.data.models.balance import BalanceModel
from app.data.transaction import atomic
from app.domain.errors import ValidationError, InsufficientBalance, NotFound
from app.repos.balance_repo import BalanceRepo
from app.services.lock_service import LockService
from app.utils.settings import BALANCE_LOCK_TTL_SECONDS
from app.utils.logging import get_logger

logger = get_logger(__name__)

CENT = Decimal("0.01")


def to_amount(value) -> Decimal:
    """Normalizes a money value to two places; only positive amounts are accepted."""
    try:
        amount = Decimal(str(value)).quantize(CENT)
    except (InvalidOperation, ValueError):
        raise ValidationError(f"invalid amount: {value!r}")
    if amount <= 0:
        raise ValidationError("amount must be positive")
    return amount


def balance_lock_key(user_id: int) -> str:
    return f"balance_lock:{user_id}"


class BalanceService:
    """
    Ledger uzytkownika.

    Kazda zmiana salda idzie pod lockiem per uzytkownik (redis, ttl 5s),
    a wewnatrz pod blokada wiersza (SELECT ... FOR UPDATE) jako druga linia obrony,
    gdyby lock wygasl albo redis padl.
    """

    def __init__(self, db: Session, lock_service: LockService, lock_ttl: int = BALANCE_LOCK_TTL_SECONDS):
        self.db = db
        self.repo = BalanceRepo(db)
        self.lock_service = lock_service
        self.lock_ttl = lock_ttl

    @contextmanager
    def hold(self, *user_ids: int):
        """
        Locks of all given users, always taken in ascending id order so two
        opposite transfers can never wait on each other. Raises LockContention.
        """
        with ExitStack() as stack:
            for user_id in sorted(set(user_ids)):
                stack.enter_context(self.lock_service.hold(balance_lock_key(user_id), self.lock_ttl))
            yield

    def _locked_balance(self, user_id: int) -> BalanceModel:
        balance = self.repo.get_for_update(user_id)
        if balance is None:
            raise NotFound(f"balance of user {user_id} not found")
        return balance

    def debit(self, user_id: int, amount: Decimal) -> BalanceModel:
        """
        Locked read-then-write without commit. The caller holds ``hold(user_id)``
        and owns the transaction.
        """
        balance = self._locked_balance(user_id)
        if balance.amount < amount:
            raise InsufficientBalance()
        return self.repo.set_amount(balance, balance.amount - amount)

    def deposit(self, user_id: int, amount) -> Decimal:
        amount = to_amount(amount)

        with self.hold(user_id):
            with atomic(self.db):
                balance = self._locked_balance(user_id)
                self.repo.set_amount(balance, balance.amount + amount)

        logger.info(f"Deposit {amount} for user {user_id}, balance {balance.amount}")
        return balance.amount

    def withdraw(self, user_id: int, amount) -> None:
        amount = to_amount(amount)

        with self.hold(user_id):
            with atomic(self.db):
                balance = self.debit(user_id, amount)

        logger.info(f"Withdraw {amount} for user {user_id}, balance {balance.amount}")

    def transfer(self, from_user_id: int, to_user_id: int, amount) -> tuple[BalanceModel, BalanceModel]:
        amount = to_amount(amount)
        if from_user_id == to_user_id:
            raise ValidationError("cannot send balance to the same account")

        with self.hold(from_user_id, to_user_id):
            with atomic(self.db):
                # blokady wierszy w tej samej kolejnosci co locki
                rows = {uid: self._locked_balance(uid) for uid in sorted((from_user_id, to_user_id))}
                sender, receiver = rows[from_user_id], rows[to_user_id]

                if sender.amount < amount:
                    raise InsufficientBalance()

                self.repo.set_amount(sender, sender.amount - amount)
                self.repo.set_amount(receiver, receiver.amount + amount)

        logger.info(f"Transfer {amount} from user {from_user_id} to user {to_user_id}")
        return sender, receiver

    def check_balance(self, user_id: int) -> Decimal:
        balance = self.repo.get(user_id)
        if balance is None:
            raise NotFound(f"balance of user {user_id} not found")
        return balance.amount
