# app/repos/outbox_repo.py
import json
from datetime import datetime, timezone

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from app.data.models.outbox import OutboxModel, OUTBOX_NEW, OUTBOX_SENT


class OutboxRepo:
    def __init__(self, db: Session):
        self.db = db

    def add(self, queue: str, payload: dict) -> OutboxModel:
        row = OutboxModel(queue=queue, payload=json.dumps(payload), status=OUTBOX_NEW)
        self.db.add(row)
        self.db.flush()
        return row

    def pending(self, limit: int) -> list[OutboxModel]:
        return list(
            self.db.execute(
                select(OutboxModel)
                .where(OutboxModel.status == OUTBOX_NEW)
                .order_by(OutboxModel.id)
                .limit(limit)
            ).scalars()
        )

    def mark_sent(self, outbox_id: int):
        self.db.execute(
            update(OutboxModel)
            .where(OutboxModel.id == outbox_id)
            .values(status=OUTBOX_SENT, sent_at=datetime.now(timezone.utc))
        )
        self.db.commit()
