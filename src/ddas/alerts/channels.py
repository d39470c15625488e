"""Notification channels.

A channel delivers one notification using its per-subscription config.
Delivery failures are raised; the AlertManager records them on the
notification.

Built-in channels:
- log: stdlib logging (level follows alert severity)
- jsonl: append the alert event to a JSONL file (config: path)
- webhook: POST the event as JSON (config: url, headers, timeout)
- console: rich panel on stdout
- email: HTML summary over SMTP (config: to, from, host, port, starttls,
  username, password, timeout)

Add channels without changing manager code via register_channel().
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from email.message import EmailMessage
from typing import Any, Dict
import html
import logging
import smtplib

import requests
from rich.console import Console
from rich.panel import Panel

from ..detection.schema import DuplicationAlert
from ..storage.writer import append_jsonl
from .schema import AlertNotification

log = logging.getLogger("ddas.alerts")

SEVERITY = {
    "exact": "critical",
    "similar": "high",
    "potential": "medium",
}


def alert_severity(alert: DuplicationAlert) -> str:
    return SEVERITY.get(alert.type.value, "low")


def alert_payload(notification: AlertNotification) -> Dict[str, Any]:
    return {
        "event": "duplication_alert",
        "alert": notification.alert.to_event(),
        "severity": alert_severity(notification.alert),
        "subscription_id": notification.subscription_id,
        "user_id": notification.user_id,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


class AlertChannel(ABC):
    name: str = "channel"

    @abstractmethod
    def send(self, notification: AlertNotification, config: Dict[str, Any]) -> None:
        ...


class LogChannel(AlertChannel):
    name = "log"

    def send(self, notification: AlertNotification, config: Dict[str, Any]) -> None:
        alert = notification.alert
        level = logging.WARNING if alert_severity(alert) in ("critical", "high") else logging.INFO
        log.log(
            level,
            f"[{alert.type.value.upper()}] {alert.duplicate_dataset.name} ~ {alert.original_dataset.name} "
            f"({alert.confidence * 100:.1f}%) user={notification.user_id or '-'}: {alert.recommendation}",
        )


class JSONLChannel(AlertChannel):
    name = "jsonl"

    def send(self, notification: AlertNotification, config: Dict[str, Any]) -> None:
        path = config.get("path")
        if not path:
            raise ValueError("jsonl channel requires config.path")
        append_jsonl(path, [alert_payload(notification)])


class WebhookChannel(AlertChannel):
    name = "webhook"

    def send(self, notification: AlertNotification, config: Dict[str, Any]) -> None:
        url = config.get("url")
        if not url:
            raise ValueError("webhook channel requires config.url")
        headers = {"Content-Type": "application/json", **(config.get("headers") or {})}
        response = requests.post(
            url,
            json=alert_payload(notification),
            headers=headers,
            timeout=float(config.get("timeout", 10)),
        )
        if not response.ok:
            raise RuntimeError(f"Webhook failed: {response.status_code} {response.reason}")


class ConsoleChannel(AlertChannel):
    name = "console"

    def __init__(self, console: Console | None = None):
        self.console = console or Console()

    def send(self, notification: AlertNotification, config: Dict[str, Any]) -> None:
        alert = notification.alert
        sim = alert.similarities
        style = "red" if alert.type.value == "exact" else "yellow"
        body = (
            f"[bold]{alert.duplicate_dataset.name}[/bold] duplicates "
            f"[bold]{alert.original_dataset.name}[/bold]\n"
            f"Confidence: {alert.confidence * 100:.1f}%  "
            f"(jaccard {sim.jaccard:.2f}, cosine {sim.cosine:.2f}, "
            f"structural {sim.structural:.2f}, semantic {sim.semantic:.2f})\n"
            f"{alert.recommendation}"
        )
        self.console.print(Panel(body, title=f"{alert.type.value.upper()} duplicate", border_style=style))


def generate_email_content(alert: DuplicationAlert) -> str:
    sim = alert.similarities
    metrics = "".join(
        f"<li>{label} Similarity: {value * 100:.1f}%</li>"
        for label, value in (
            ("Jaccard", sim.jaccard),
            ("Cosine", sim.cosine),
            ("Structural", sim.structural),
            ("Semantic", sim.semantic),
        )
    )
    return (
        "<h2>Dataset Duplication Alert</h2>"
        f"<p><strong>Alert Type:</strong> {alert.type.value.upper()}</p>"
        f"<p><strong>Confidence:</strong> {alert.confidence * 100:.1f}%</p>"
        f"<p><strong>Original Dataset:</strong> {html.escape(alert.original_dataset.name)}</p>"
        f"<p><strong>Duplicate Dataset:</strong> {html.escape(alert.duplicate_dataset.name)}</p>"
        f"<p><strong>Recommendation:</strong> {html.escape(alert.recommendation)}</p>"
        f"<p><strong>Detected At:</strong> {alert.created_at.isoformat()}</p>"
        f"<h3>Similarity Metrics:</h3><ul>{metrics}</ul>"
    )


class EmailChannel(AlertChannel):
    name = "email"

    def send(self, notification: AlertNotification, config: Dict[str, Any]) -> None:
        to = config.get("to") or config.get("email")
        if not to:
            raise ValueError("email channel requires config.to")
        alert = notification.alert

        msg = EmailMessage()
        msg["Subject"] = (
            f"[DDAS] {alert.type.value.upper()} duplicate: "
            f"{alert.duplicate_dataset.name} ~ {alert.original_dataset.name}"
        )
        msg["From"] = config.get("from", "ddas@localhost")
        msg["To"] = to if isinstance(to, str) else ", ".join(to)
        msg.set_content(f"{alert.recommendation}\nConfidence: {alert.confidence * 100:.1f}%")
        msg.add_alternative(generate_email_content(alert), subtype="html")

        host = config.get("host", "localhost")
        port = int(config.get("port", 25))
        with smtplib.SMTP(host, port, timeout=float(config.get("timeout", 10))) as smtp:
            if config.get("starttls"):
                smtp.starttls()
            if config.get("username"):
                smtp.login(config["username"], config.get("password", ""))
            smtp.send_message(msg)
        log.debug(f"Emailed alert {alert.id} to {msg['To']} via {host}:{port}")


_CHANNELS: Dict[str, AlertChannel] = {
    "log": LogChannel(),
    "jsonl": JSONLChannel(),
    "webhook": WebhookChannel(),
    "console": ConsoleChannel(),
    "email": EmailChannel(),
}


def register_channel(name: str, channel: AlertChannel) -> None:
    """Register a new channel type at runtime."""
    if name in _CHANNELS:
        raise ValueError(f"Alert channel '{name}' already registered")
    _CHANNELS[name] = channel


def list_channels() -> list[str]:
    return list(_CHANNELS.keys())


def get_channel(name: str) -> AlertChannel:
    if name not in _CHANNELS:
        raise KeyError(
            f"Unknown alert channel: {name}. "
            f"Available: {list(_CHANNELS)}. "
            f"Register with register_channel()"
        )
    return _CHANNELS[name]
