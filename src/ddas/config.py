"""Configuration loader.

Configuration is a single YAML file (see configs/ddas.yaml):

    run:          run_id / run_id_auto / out_dir / log_dir
    fingerprints: fingerprint_version, merkle {enabled, chunk_size}, bloom {enabled, size, hash_count}
    detection:    thresholds {exact, similar, potential}, retention_days, default_quality {...}
    alerts:       parquet (bool), subscriptions [...]

Every section is optional; missing keys fall back to defaults. Keeping
thresholds in YAML means calibration changes are reviewed as config, not code.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional
import yaml

from .alerts.schema import AlertSubscription
from .datasets.schema import QualityMetrics
from .datasets.submission import DEFAULT_QUALITY
from .fingerprints.schema import HashParams
from .similarity.metrics import Thresholds


def load_yaml(path: str) -> Dict[str, Any]:
    with open(path, "r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


@dataclass
class DetectionConfig:
    thresholds: Thresholds = field(default_factory=Thresholds)
    retention_days: float = 30
    default_quality: QualityMetrics = DEFAULT_QUALITY

    @classmethod
    def from_dict(cls, d: Optional[Dict[str, Any]]) -> DetectionConfig:
        d = d or {}
        retention = float(d.get("retention_days", 30))
        if retention < 0:
            raise ValueError(f"detection.retention_days must be >= 0, got {retention}")
        return cls(
            thresholds=Thresholds.from_dict(d.get("thresholds")),
            retention_days=retention,
            default_quality=QualityMetrics.from_dict(d.get("default_quality"), default=DEFAULT_QUALITY),
        )


@dataclass
class AlertsConfig:
    parquet: bool = True
    subscriptions: List[AlertSubscription] = field(default_factory=list)

    @classmethod
    def from_dict(cls, d: Optional[Dict[str, Any]]) -> AlertsConfig:
        d = d or {}
        return cls(
            parquet=bool(d.get("parquet", True)),
            subscriptions=[AlertSubscription.from_dict(s) for s in (d.get("subscriptions") or [])],
        )


@dataclass
class DDASConfig:
    run: Dict[str, Any] = field(default_factory=dict)
    fingerprints: HashParams = field(default_factory=HashParams)
    detection: DetectionConfig = field(default_factory=DetectionConfig)
    alerts: AlertsConfig = field(default_factory=AlertsConfig)

    @classmethod
    def from_dict(cls, cfg: Optional[Dict[str, Any]]) -> DDASConfig:
        cfg = cfg or {}
        return cls(
            run=dict(cfg.get("run") or {}),
            fingerprints=HashParams.from_dict(cfg.get("fingerprints")),
            detection=DetectionConfig.from_dict(cfg.get("detection")),
            alerts=AlertsConfig.from_dict(cfg.get("alerts")),
        )

    @classmethod
    def load(cls, path: Optional[str]) -> DDASConfig:
        if not path:
            return cls()
        return cls.from_dict(load_yaml(path))
