"""Alert manager: fan duplication alerts out to subscribed channels.

Flow: alert -> matching active subscriptions (all filters must match)
-> one notification per subscription -> deliver to each of its channels.

A notification is `sent` when every channel delivered, `failed` otherwise
(first error kept). One subscription failing never blocks the others.
"""

from __future__ import annotations
from datetime import datetime
from typing import Callable, Dict, List, Optional
import logging
import threading

from ..datasets.submission import utcnow
from ..detection.schema import DuplicationAlert
from .channels import get_channel
from .schema import AlertNotification, AlertSubscription, NotificationStatus

log = logging.getLogger("ddas.alerts")


class AlertManager:

    def __init__(self, clock: Callable[[], datetime] = utcnow):
        self.clock = clock
        self._lock = threading.Lock()
        self._subscriptions: Dict[str, AlertSubscription] = {}
        self._notifications: List[AlertNotification] = []

    def subscribe(self, subscription: AlertSubscription) -> AlertSubscription:
        for channel in subscription.channels:
            get_channel(channel.type)  # unknown channel types fail at subscribe time
        with self._lock:
            self._subscriptions[subscription.id] = subscription
        log.info(
            f"Subscription {subscription.id} for user={subscription.user_id or '-'} "
            f"channels={[c.type for c in subscription.channels]} filters={len(subscription.filters)}"
        )
        return subscription

    def unsubscribe(self, subscription_id: str) -> bool:
        with self._lock:
            return self._subscriptions.pop(subscription_id, None) is not None

    def subscriptions(self) -> List[AlertSubscription]:
        with self._lock:
            return list(self._subscriptions.values())

    def process_alert(self, alert: DuplicationAlert) -> List[AlertNotification]:
        """Deliver an alert to every matching subscription. Returns the notifications created."""
        with self._lock:
            matching = [s for s in self._subscriptions.values() if s.matches(alert)]

        created: List[AlertNotification] = []
        for subscription in matching:
            notification = AlertNotification(
                alert=alert,
                subscription_id=subscription.id,
                user_id=subscription.user_id,
                channels=[c.type for c in subscription.channels],
                created_at=self.clock(),
            )
            with self._lock:
                self._notifications.append(notification)
            self._deliver(notification, subscription)
            created.append(notification)
        return created

    def _deliver(self, notification: AlertNotification, subscription: AlertSubscription) -> None:
        errors = []
        for channel in subscription.channels:
            try:
                get_channel(channel.type).send(notification, channel.config)
            except Exception as e:
                log.warning(
                    f"Channel {channel.type} failed for notification {notification.id} "
                    f"(subscription {subscription.id}): {e}"
                )
                errors.append(f"{channel.type}: {e}")
        if errors:
            notification.status = NotificationStatus.FAILED
            notification.error = errors[0]
        else:
            notification.status = NotificationStatus.SENT
            notification.sent_at = self.clock()

    def get_notifications(self, user_id: Optional[str] = None) -> List[AlertNotification]:
        with self._lock:
            return [n for n in self._notifications if user_id is None or n.user_id == user_id]
