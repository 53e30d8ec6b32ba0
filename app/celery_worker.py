# app/celery_worker.py
from celery import Celery

from app.utils.settings import (
    CELERY_BROKER_URL,
    CELERY_RESULT_BACKEND,
    REAPER_INTERVAL_SECONDS,
    OUTBOX_RELAY_INTERVAL_SECONDS,
)

celery_app = Celery(
    "shop",
    broker=CELERY_BROKER_URL,
    backend=CELERY_RESULT_BACKEND,
)

# taski importowane explicite, zeby Celery je zarejestrowal
celery_app.conf.imports = (
    "app.tasks.expire",
    "app.tasks.outbox",
)

celery_app.conf.beat_schedule = {
    "expire-payments-every-minute": {
        "task": "app.tasks.expire.expire_payments_task",
        "schedule": REAPER_INTERVAL_SECONDS,
    },
    "relay-outbox": {
        "task": "app.tasks.outbox.relay_outbox_task",
        "schedule": OUTBOX_RELAY_INTERVAL_SECONDS,
    },
}

celery_app.conf.timezone = "UTC"
