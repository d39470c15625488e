"""Alert distribution data model: subscriptions, filters, notifications."""

from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional
import uuid

from ..detection.schema import DuplicationAlert


class NotificationStatus(str, Enum):
    PENDING = "pending"
    SENT = "sent"
    FAILED = "failed"


FILTER_TYPES = {"confidence", "dataset_type", "organization", "tags"}
FILTER_OPERATORS = {"gt", "lt", "eq", "contains"}

# filter type -> operator -> accepted value types
FILTER_RULES: Dict[str, Dict[str, tuple]] = {
    "confidence": {"gt": (int, float), "lt": (int, float), "eq": (int, float)},
    "dataset_type": {"eq": (str,), "contains": (str,)},
    "organization": {"eq": (str,), "contains": (str,)},
    "tags": {"eq": (list,), "contains": (str,)},
}


@dataclass(frozen=True)
class ChannelConfig:
    type: str  # log | jsonl | webhook | console | email
    config: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, d: Mapping[str, Any]) -> ChannelConfig:
        return cls(type=str(d["type"]), config=dict(d.get("config") or {}))


@dataclass(frozen=True)
class AlertFilter:
    type: str  # confidence | dataset_type | organization | tags
    operator: str  # gt | lt | eq | contains
    value: Any

    def __post_init__(self):
        if self.type not in FILTER_TYPES:
            raise ValueError(f"Unknown alert filter type: {self.type}. Available: {sorted(FILTER_TYPES)}")
        if self.operator not in FILTER_OPERATORS:
            raise ValueError(f"Unknown alert filter operator: {self.operator}. Available: {sorted(FILTER_OPERATORS)}")
        allowed = FILTER_RULES[self.type]
        if self.operator not in allowed:
            raise ValueError(
                f"Operator {self.operator!r} does not apply to {self.type!r} filters. Available: {sorted(allowed)}"
            )
        types = allowed[self.operator]
        if isinstance(self.value, bool) or not isinstance(self.value, types):
            raise ValueError(
                f"{self.type} {self.operator} filter needs a {'/'.join(t.__name__ for t in types)} value, "
                f"got {self.value!r}"
            )

    @classmethod
    def from_dict(cls, d: Mapping[str, Any]) -> AlertFilter:
        return cls(type=str(d["type"]), operator=str(d["operator"]), value=d.get("value"))

    def _field_value(self, alert: DuplicationAlert) -> Any:
        dup = alert.duplicate_dataset
        if self.type == "confidence":
            return alert.confidence
        if self.type == "dataset_type":
            return dup.format
        if self.type == "organization":
            return dup.metadata.organization
        return dup.metadata.tags

    def matches(self, alert: DuplicationAlert) -> bool:
        value = self._field_value(alert)
        if self.operator == "gt":
            return value > self.value
        if self.operator == "lt":
            return value < self.value
        if self.operator == "eq":
            return value == self.value
        if isinstance(value, list):
            return any(str(self.value) in str(v) for v in value)
        return str(self.value) in str(value)


@dataclass
class AlertSubscription:
    user_id: str
    channels: List[ChannelConfig] = field(default_factory=list)
    filters: List[AlertFilter] = field(default_factory=list)
    is_active: bool = True
    id: str = field(default_factory=lambda: f"sub_{uuid.uuid4().hex}")

    @classmethod
    def from_dict(cls, d: Mapping[str, Any]) -> AlertSubscription:
        user_id = str(d.get("user_id") or "")
        channels = [ChannelConfig.from_dict(c) for c in (d.get("channels") or [])]
        if not channels:
            channels = [ChannelConfig(type="log", config={"user_id": user_id})]
        kwargs: Dict[str, Any] = {}
        if d.get("id"):
            kwargs["id"] = str(d["id"])
        return cls(
            user_id=user_id,
            channels=channels,
            filters=[AlertFilter.from_dict(f) for f in (d.get("filters") or [])],
            is_active=bool(d.get("is_active", True)),
            **kwargs,
        )

    def matches(self, alert: DuplicationAlert) -> bool:
        return self.is_active and all(f.matches(alert) for f in self.filters)


@dataclass
class AlertNotification:
    alert: DuplicationAlert
    subscription_id: str
    user_id: str
    channels: List[str]
    created_at: datetime
    status: NotificationStatus = NotificationStatus.PENDING
    sent_at: Optional[datetime] = None
    error: Optional[str] = None
    id: str = field(default_factory=lambda: f"notif_{uuid.uuid4().hex}")
