"""Example: Adding a new alert channel without modifying channels.py.

This demonstrates how to add a notification channel at runtime and
subscribe to it, without touching the built-in channels or the manager.
"""

from typing import Any, Dict

from ddas.alerts import (
    AlertChannel,
    AlertFilter,
    AlertNotification,
    AlertSubscription,
    ChannelConfig,
    list_channels,
    register_channel,
)
from ddas.service import DetectionService


# Example: Channel that collects notifications into a digest
class DigestChannel(AlertChannel):
    """Buffers one line per notification; a scheduler would send the digest."""

    name = "digest"

    def __init__(self):
        self.lines = []

    def send(self, notification: AlertNotification, config: Dict[str, Any]) -> None:
        alert = notification.alert
        prefix = config.get("prefix", "")
        self.lines.append(
            f"{prefix}{alert.type.value}: {alert.duplicate_dataset.name} ~ "
            f"{alert.original_dataset.name} ({alert.confidence * 100:.1f}%)"
        )


digest = DigestChannel()
register_channel("digest", digest)

print("Registered channels:")
for name in list_channels():
    print(f"  {name}")

payload = {
    "name": "customers-2024",
    "source": "https://data.example.org/customers.json",
    "content": [{"id": 1, "name": "Ada"}, {"id": 2, "name": "Linus"}],
    "metadata": {"title": "Customer records", "description": "Monthly customer export"},
}

with DetectionService() as service:
    service.alert_manager.subscribe(AlertSubscription(
        user_id="analyst",
        channels=[ChannelConfig("digest", {"prefix": "[ddas] "})],
        filters=[AlertFilter("confidence", "gt", 0.9)],
    ))
    service.submit(payload)
    service.submit(dict(payload, name="customers-2024-copy"))

print("Digest:")
for line in digest.lines:
    print(f"  {line}")

# Or subscribe from config:
# alerts:
#   subscriptions:
#     - user_id: analyst
#       channels:
#         - type: digest
#           config: {prefix: "[ddas] "}
