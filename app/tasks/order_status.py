# app/tasks/order_status.py
from kombu.mixins import ConsumerMixin
from kombu.utils.limits import TokenBucket
from kombu.utils.objects import cached_property
from pydantic import ValidationError as SchemaError
from sqlalchemy.orm import sessionmaker

from app.data.database import SessionLocal
from app.domain.errors import NotFound, ValidationError
from app.domain.schemas import OrderStatusEvent
from app.services.messaging import MessageBus, QUEUE_UPDATE_ORDER_STATUS
from app.services.order_service import OrderService
from app.utils.settings import CONSUMER_RECONNECT_DELAY_SECONDS
from app.utils.logging import get_logger

logger = get_logger(__name__)


class OrderStatusConsumer(ConsumerMixin):
    """
    Subskrybent kolejki order.status, reczne ack/nack.

    received -> malformed: reject bez requeue (poison message)
             -> kanal zamkniety: requeue, bez przetwarzania
             -> blad zapisu: requeue (retry)
             -> zapisane: ack

    Po zerwaniu polaczenia ConsumerMixin.run() czeka chwile i subskrybuje ponownie.
    """

    def __init__(
        self,
        bus: MessageBus,
        session_factory: sessionmaker = SessionLocal,
        queue_name: str = QUEUE_UPDATE_ORDER_STATUS,
        reconnect_delay: float = CONSUMER_RECONNECT_DELAY_SECONDS,
    ):
        self.connection = bus.connection
        self.queue = bus.queue(queue_name)
        self.session_factory = session_factory
        self.reconnect_delay = reconnect_delay
        self._active_connection = None

    @cached_property
    def restart_limit(self):
        return TokenBucket(1 / self.reconnect_delay)

    def get_consumers(self, Consumer, channel):
        return [
            Consumer(
                queues=[self.queue],
                on_message=self.handle_message,
                accept=["json"],
                prefetch_count=10,
            )
        ]

    def on_consume_ready(self, connection, channel, consumers, **kwargs):
        self._active_connection = connection
        logger.info(f"Consuming {self.queue.name}")

    def on_consume_end(self, connection, channel):
        self._active_connection = None

    def on_connection_error(self, exc, interval):
        logger.warning(f"Broker connection error: {exc}, retrying in {interval}s")

    def on_connection_revived(self):
        logger.info(f"Broker connection re-established, resubscribing to {self.queue.name}")

    def channel_closed(self) -> bool:
        return self._active_connection is None or not self._active_connection.connected

    def handle_message(self, message):
        logger.debug(f"Message received on {self.queue.name}: {message.body!r}")

        try:
            event = OrderStatusEvent.model_validate_json(message.body)
        except SchemaError as e:
            logger.error(f"Dropping malformed message on {self.queue.name}: {e}")
            message.reject(requeue=False)
            return

        if self.channel_closed():
            logger.warning(f"Channel of {self.queue.name} closed, message will be requeued")
            message.requeue()
            return

        try:
            with self.session_factory() as db:
                OrderService(db).update_status_order(event.order_id, event.status)
        except (NotFound, ValidationError) as e:
            # ponowne dostarczenie nic nie zmieni
            logger.error(f"Dropping status event of order {event.order_id}: {e}")
            message.reject(requeue=False)
            return
        except Exception as e:
            logger.error(f"Failed to update status of order {event.order_id}, requeue: {e}")
            message.requeue()
            return

        logger.info(f"Order {event.order_id} status event applied ({event.status})")
        message.ack()
