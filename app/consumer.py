# app/consumer.py
import signal

from app.services.messaging import MessageBus
from app.tasks.order_status import OrderStatusConsumer
from app.utils.logging import get_logger

logger = get_logger(__name__)


def main():
    bus = MessageBus()
    consumer = OrderStatusConsumer(bus)

    def _stop(signum, frame):
        logger.info(f"Signal {signum} received, stopping consumer")
        consumer.should_stop = True

    signal.signal(signal.SIGINT, _stop)
    signal.signal(signal.SIGTERM, _stop)

    logger.info("Order status consumer started")
    try:
        consumer.run()
    finally:
        bus.close()
        logger.info("Order status consumer stopped")


if __name__ == "__main__":
    main()
