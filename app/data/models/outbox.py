from sqlalchemy import Column, Integer, String, Text, DateTime
from datetime import datetime, timezone

from app.data.database import Base

OUTBOX_NEW = "new"
OUTBOX_SENT = "sent"


class OutboxModel(Base):
    __tablename__ = "outbox"

    id = Column(Integer, primary_key=True, autoincrement=True)
    queue = Column(String(64), nullable=False)
    payload = Column(Text, nullable=False)
    status = Column(String(16), nullable=False, default=OUTBOX_NEW, index=True)  # new|sent
    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))
    sent_at = Column(DateTime(timezone=True), nullable=True)
