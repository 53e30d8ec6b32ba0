# app/domain/errors.py


class ShopError(Exception):
    """Base error of the domain layer; routers map it to ``status_code``."""

    status_code = 500
    default_message = "internal error"

    def __init__(self, message: str | None = None):
        super().__init__(message or self.default_message)


class ValidationError(ShopError):
    status_code = 400
    default_message = "invalid argument"


class LockContention(ShopError):
    """Another operation holds the lock; the caller should retry with backoff."""

    status_code = 409
    default_message = "another transaction is in progress, try again later"


class InsufficientBalance(ShopError):
    status_code = 400
    default_message = "insufficient balance"


class InsufficientStock(ShopError):
    status_code = 400
    default_message = "insufficient stock"


class EmptyCart(ShopError):
    status_code = 400
    default_message = "cart is empty"


class NotFound(ShopError):
    status_code = 404
    default_message = "data not found"


class PaymentNotPayable(ShopError):
    status_code = 409
    default_message = "payment is no longer payable"


class Conflict(ShopError):
    """Write rejected by a database constraint (row still referenced, duplicate)."""

    status_code = 409
    default_message = "conflicting data"


class Internal(ShopError):
    status_code = 500
