"""In-process fan-out of "record inserted" push events.

The real-time transport (websocket client, database listener, ...) is not
part of this package. Whatever delivers insert events publishes them here,
and gateways hand out subscriptions on this broker.
"""

from dataclasses import dataclass
from typing import Any
from uuid import uuid4

import logfire

from eventtalk.domain.gateway import ErrorHandler, InsertHandler
from eventtalk.domain.value import Subscription, SubscriptionId, UserId


@dataclass(frozen=True)
class _Subscriber:
    recipient_id: UserId
    on_insert: InsertHandler
    on_error: ErrorHandler


class PushBroker:
    """Routes insert events to the subscribers of their recipient."""

    def __init__(self) -> None:
        self._subscribers: dict[SubscriptionId, _Subscriber] = {}

    def subscribe(
        self,
        recipient_id: UserId,
        on_insert: InsertHandler,
        on_error: ErrorHandler,
    ) -> Subscription:
        subscription = Subscription(
            id=SubscriptionId(uuid4()), recipient_id=recipient_id
        )
        self._subscribers[subscription.id] = _Subscriber(
            recipient_id=recipient_id, on_insert=on_insert, on_error=on_error
        )
        logfire.info(
            "Push subscription opened",
            subscription_id=str(subscription.id),
            recipient_id=str(recipient_id),
        )
        return subscription

    def unsubscribe(self, subscription: Subscription) -> None:
        if self._subscribers.pop(subscription.id, None) is not None:
            logfire.info(
                "Push subscription closed", subscription_id=str(subscription.id)
            )

    def subscriber_count(self, recipient_id: UserId | None = None) -> int:
        if recipient_id is None:
            return len(self._subscribers)
        return sum(
            1 for s in self._subscribers.values() if s.recipient_id == recipient_id
        )

    async def publish(self, recipient_id: UserId, payload: dict[str, Any]) -> int:
        """Deliver an insert event to every subscriber of the recipient.

        A failing handler is reported to its own error callback and does not
        stop delivery to the others.

        Returns:
            Number of subscribers the event was delivered to
        """
        delivered = 0
        for subscription_id, subscriber in list(self._subscribers.items()):
            if subscriber.recipient_id != recipient_id:
                continue
            # Unsubscribed by an earlier handler in this loop
            if subscription_id not in self._subscribers:
                continue
            try:
                await subscriber.on_insert(payload)
            except Exception as e:
                logfire.error(
                    "Push handler failed",
                    subscription_id=str(subscription_id),
                    error=str(e),
                )
                subscriber.on_error(e)
            delivered += 1
        return delivered
