from sqlalchemy import Column, Integer, ForeignKey, String, DateTime
from datetime import datetime, timezone

from app.data.database import Base

PAYMENT_PENDING = "pending"
PAYMENT_COMPLETED = "completed"
PAYMENT_FAILED = "failed"

METHOD_BALANCE = "balance"
METHOD_TRANSFER = "transfer"


def _now():
    return datetime.now(timezone.utc)


class PaymentModel(Base):
    __tablename__ = "payments"

    id = Column(Integer, primary_key=True)
    order_id = Column(Integer, ForeignKey("orders.id"), nullable=False, unique=True)

    payment_method = Column(String, nullable=False)
    payment_status = Column(String, nullable=False, default=PAYMENT_PENDING)  # pending, completed, failed

    created_at = Column(DateTime(timezone=True), nullable=False, default=_now)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_now, onupdate=_now)
    expired_at = Column(DateTime(timezone=True), nullable=False, index=True)
