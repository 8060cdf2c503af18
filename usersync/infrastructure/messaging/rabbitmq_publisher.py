# usersync/infrastructure/messaging/rabbitmq_publisher.py

import json
from typing import Any, Dict

import aio_pika


class RabbitMQEventHook:
    """
    Downstream hook that publishes each applied event to a durable topic exchange,
    routed by event type. Delivery is at-least-once; consumers dedupe on data.
    """

    def __init__(self, url: str, exchange_name: str = "user_events"):
        self._url = url
        self._exchange_name = exchange_name
        self._connection = None
        self._channel = None
        self._exchange = None

    async def connect(self):
        self._connection = await aio_pika.connect_robust(self._url)
        self._channel = await self._connection.channel(publisher_confirms=True)
        self._exchange = await self._channel.declare_exchange(
            self._exchange_name,
            aio_pika.ExchangeType.TOPIC,
            durable=True,
        )

    async def close(self):
        if self._connection is not None:
            await self._connection.close()
        self._connection = None
        self._channel = None
        self._exchange = None

    async def __call__(self, event_type: str, data: Dict[str, Any]) -> None:
        if not self._exchange:
            await self.connect()

        msg = aio_pika.Message(
            body=json.dumps({"type": event_type, "data": data}, default=str).encode(),
            content_type="application/json",
            delivery_mode=aio_pika.DeliveryMode.PERSISTENT,
        )

        await self._exchange.publish(msg, routing_key=event_type)
