"""Alert distribution: subscriptions, filters and notification channels."""

from .schema import (
    AlertFilter,
    AlertNotification,
    AlertSubscription,
    ChannelConfig,
    NotificationStatus,
)
from .channels import (
    AlertChannel,
    alert_severity,
    generate_email_content,
    get_channel,
    list_channels,
    register_channel,
)
from .manager import AlertManager

__all__ = [
    "AlertFilter",
    "AlertNotification",
    "AlertSubscription",
    "ChannelConfig",
    "NotificationStatus",
    "AlertChannel",
    "alert_severity",
    "generate_email_content",
    "get_channel",
    "list_channels",
    "register_channel",
    "AlertManager",
]
