"""Duplication detector: dataset registry + comparison orchestrator.

Flow per insertion:
    snapshot registered peers -> register -> for each peer:
        exact shortcut (content + schema hash) -> exact alert, confidence 1.0,
            similarity metrics still recorded for the event
        else similarity metrics -> classify -> alert unless "none"

A new dataset is compared against exactly the datasets present when its
insertion starts, and never against itself or anything registered later.
Insertions hold the registry lock for the whole scan so they are linearized.
"""

from __future__ import annotations
from datetime import datetime, timedelta
from typing import Callable, Dict, List, Optional, Tuple
import logging
import threading
import uuid

from ..datasets.schema import Dataset
from ..datasets.submission import utcnow
from ..similarity.metrics import (
    DuplicationType,
    SimilarityMetrics,
    Thresholds,
    calculate_similarity,
    classify,
)
from .metrics import DetectionMetrics
from .schema import DatasetAlreadyRegistered, DuplicationAlert

log = logging.getLogger("ddas.detection")

AlertListener = Callable[[DuplicationAlert], None]


def generate_recommendation(alert_type: DuplicationType, similarity: SimilarityMetrics) -> str:
    pct = f"{similarity.confidence * 100:.1f}%"
    if alert_type == DuplicationType.EXACT:
        return "This appears to be an exact duplicate. Consider using a reference link instead of downloading."
    if alert_type == DuplicationType.SIMILAR:
        return f"High similarity detected ({pct}). Review differences before downloading."
    if alert_type == DuplicationType.POTENTIAL:
        return f"Potential duplicate detected ({pct}). Consider if this dataset adds unique value."
    return "No specific recommendation available."


class DuplicationDetector:
    """
    In-memory registry of datasets and append-only alert log.
    Owned by the service layer; there is no module-level instance.
    """

    def __init__(
        self,
        thresholds: Optional[Thresholds] = None,
        clock: Callable[[], datetime] = utcnow,
        listeners: Optional[List[AlertListener]] = None,
    ):
        self.thresholds = thresholds or Thresholds()
        self.clock = clock
        self.listeners: List[AlertListener] = list(listeners or [])
        self.metrics = DetectionMetrics()

        self._lock = threading.RLock()
        self._datasets: Dict[str, Dataset] = {}
        self._alerts: List[DuplicationAlert] = []
        # (content_hash, schema_hash) -> dataset ids, for the exact shortcut
        self._exact_index: Dict[Tuple[str, str], List[str]] = {}
        self._alerts_by_dataset: Dict[str, List[DuplicationAlert]] = {}

    def add_listener(self, listener: AlertListener) -> None:
        self.listeners.append(listener)

    def add_dataset(self, dataset: Dataset) -> List[DuplicationAlert]:
        """Register a dataset and compare it against every registered peer.

        Returns the alerts produced by this insertion.
        """
        with self._lock:
            if dataset.id in self._datasets:
                raise DatasetAlreadyRegistered(f"dataset already registered: {dataset.id}")

            peers = list(self._datasets.values())
            exact_key = dataset.fingerprint.exact_key()
            exact_ids = set(self._exact_index.get(exact_key, []))

            self._datasets[dataset.id] = dataset
            self._exact_index.setdefault(exact_key, []).append(dataset.id)
            self.metrics.datasets_registered += 1

            created: List[DuplicationAlert] = []
            for existing in peers:
                alert = self._compare_and_alert(dataset, existing, existing.id in exact_ids)
                if alert is not None:
                    created.append(alert)

        log.info(
            f"Registered {dataset.id} ({dataset.name}): compared against {len(peers)} datasets, "
            f"{len(created)} alerts"
        )
        for alert in created:
            self._notify(alert)
        return created

    def _notify(self, alert: DuplicationAlert) -> None:
        # the alert is already recorded; a failing listener must not hide it from the rest
        for listener in self.listeners:
            try:
                listener(alert)
            except Exception:
                log.exception(f"Alert listener {listener!r} failed for {alert.id}")

    def _compare_and_alert(
        self,
        new_dataset: Dataset,
        existing: Dataset,
        exact_match: bool,
    ) -> Optional[DuplicationAlert]:
        similarity = calculate_similarity(new_dataset, existing)
        if exact_match:
            # same bytes and schema: confidence is 1.0 whatever the metadata says
            self.metrics.record_comparison(shortcut=True)
            return self._record_alert(new_dataset, existing, DuplicationType.EXACT, 1.0, similarity)

        self.metrics.record_comparison()
        duplication_type = classify(similarity.confidence, self.thresholds)
        if duplication_type == DuplicationType.NONE:
            return None
        return self._record_alert(new_dataset, existing, duplication_type, similarity.confidence, similarity)

    def _record_alert(
        self,
        new_dataset: Dataset,
        existing: Dataset,
        alert_type: DuplicationType,
        confidence: float,
        similarity: SimilarityMetrics,
    ) -> DuplicationAlert:
        alert = DuplicationAlert(
            id=f"alert_{uuid.uuid4().hex}",
            type=alert_type,
            confidence=confidence,
            original_dataset=existing,
            duplicate_dataset=new_dataset,
            similarities=similarity,
            recommendation=generate_recommendation(alert_type, similarity),
            created_at=self.clock(),
        )
        self._alerts.append(alert)
        self._alerts_by_dataset.setdefault(existing.id, []).append(alert)
        self._alerts_by_dataset.setdefault(new_dataset.id, []).append(alert)
        self.metrics.record_alert(alert_type.value, new_dataset.source)
        log.debug(
            f"{alert_type.value} alert {alert.id}: {new_dataset.id} duplicates {existing.id} "
            f"(confidence={confidence:.3f})"
        )
        return alert

    def compare(self, a: Dataset, b: Dataset) -> SimilarityMetrics:
        return calculate_similarity(a, b)

    def get_dataset(self, dataset_id: str) -> Optional[Dataset]:
        with self._lock:
            return self._datasets.get(dataset_id)

    def datasets(self) -> List[Dataset]:
        with self._lock:
            return list(self._datasets.values())

    def get_alerts(self) -> List[DuplicationAlert]:
        with self._lock:
            return list(self._alerts)

    def get_alerts_for_dataset(self, dataset_id: str) -> List[DuplicationAlert]:
        with self._lock:
            return list(self._alerts_by_dataset.get(dataset_id, []))

    def clear_old_alerts(self, max_age_days: float = 30) -> int:
        """Drop alerts created at or before `now - max_age_days`. Returns how many were removed."""
        cutoff = self.clock() - timedelta(days=max_age_days)
        with self._lock:
            kept = [a for a in self._alerts if a.created_at > cutoff]
            removed = len(self._alerts) - len(kept)
            self._alerts = kept
            self._alerts_by_dataset = {}
            for alert in kept:
                self._alerts_by_dataset.setdefault(alert.original_dataset.id, []).append(alert)
                self._alerts_by_dataset.setdefault(alert.duplicate_dataset.id, []).append(alert)
            self.metrics.alerts_pruned += removed
        if removed:
            log.info(f"Pruned {removed} alerts older than {max_age_days} days")
        return removed
