# app/tasks/outbox.py
import json

from celery import Task
from sqlalchemy.orm import sessionmaker

from app.celery_worker import celery_app
from app.data.database import SessionLocal
from app.repos.outbox_repo import OutboxRepo
from app.services.messaging import MessageBus
from app.utils.settings import OUTBOX_BATCH_SIZE
from app.utils.logging import get_logger

logger = get_logger(__name__)


class OutboxRelay:
    """Re-publishes events whose immediate publish failed."""

    def __init__(self, bus: MessageBus, session_factory: sessionmaker = SessionLocal, batch_size: int = OUTBOX_BATCH_SIZE):
        self.bus = bus
        self.session_factory = session_factory
        self.batch_size = batch_size

    def run_once(self) -> int:
        sent = 0
        with self.session_factory() as db:
            repo = OutboxRepo(db)
            for row in repo.pending(self.batch_size):
                try:
                    self.bus.publish(row.queue, json.loads(row.payload))
                except Exception as e:
                    # zostaje jako new, kolejny tick sprobuje ponownie
                    logger.error(f"Outbox {row.id} publish failed: {e}")
                    continue
                repo.mark_sent(row.id)
                sent += 1

        if sent:
            logger.info(f"Relayed {sent} outbox events")
        return sent


class BusTask(Task):
    """Task base owning one broker connection per worker process."""

    _bus: MessageBus | None = None

    @property
    def bus(self) -> MessageBus:
        if self._bus is None:
            self._bus = MessageBus()
        return self._bus


@celery_app.task(base=BusTask, bind=True, name="app.tasks.outbox.relay_outbox_task")
def relay_outbox_task(self):
    return OutboxRelay(self.bus).run_once()
