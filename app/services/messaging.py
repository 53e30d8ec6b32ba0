# app/services/messaging.py
from kombu import Connection, Exchange, Queue
from kombu.pools import producers

from app.utils.settings import MESSAGE_BROKER_URL
from app.utils.logging import get_logger

logger = get_logger(__name__)

QUEUE_UPDATE_ORDER_STATUS = "order.status"

EXCHANGE = Exchange("shop", type="direct", durable=True)

PUBLISH_RETRY_POLICY = {
    "interval_start": 0,
    "interval_step": 0.5,
    "interval_max": 2,
    "max_retries": 3,
}


class MessageBus:
    """
    Jedno polaczenie z brokerem na proces, tworzone przy starcie
    i przekazywane dalej (api, platnosci, relay outboxa, consumer).
    Dostarczanie at-least-once, body w JSON.
    """

    def __init__(self, url: str | None = None, connection: Connection | None = None):
        self.connection = connection or Connection(url or MESSAGE_BROKER_URL)
        self._queues: dict[str, Queue] = {}

    def queue(self, name: str) -> Queue:
        if name not in self._queues:
            self._queues[name] = Queue(name, exchange=EXCHANGE, routing_key=name, durable=True)
        return self._queues[name]

    def publish(self, queue_name: str, payload: dict):
        queue = self.queue(queue_name)
        with producers[self.connection].acquire(block=True) as producer:
            producer.publish(
                payload,
                exchange=EXCHANGE,
                routing_key=queue.routing_key,
                serializer="json",
                declare=[queue],
                retry=True,
                retry_policy=PUBLISH_RETRY_POLICY,
                delivery_mode="persistent",
            )
        logger.info(f"Published to {queue_name}: {payload}")

    def close(self):
        producers[self.connection].force_close_all()
        self.connection.release()
