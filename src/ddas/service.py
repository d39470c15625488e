"""Detection service: the one place that owns DDAS state.

Lifecycle: init -> serve (submit / query / prune) -> close (flush sink).

The service wires the pieces together:
    payload -> DatasetSubmission -> build_dataset (fingerprint, fail fast)
            -> DuplicationDetector.add_dataset -> alerts
            -> AlertManager.process_alert (fan-out) + AlertSink.emit (parquet)

Construct one per process (or per test); nothing here is a module global.
"""

from __future__ import annotations
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, List, Mapping, Optional
import logging

from .alerts.manager import AlertManager
from .analytics.sink import AlertSink
from .config import DDASConfig
from .datasets.schema import Dataset
from .datasets.submission import DatasetSubmission, build_dataset, utcnow
from .detection.detector import DuplicationDetector
from .detection.schema import DuplicationAlert
from .fingerprints.generator import DatasetFingerprinter

log = logging.getLogger("ddas.service")


@dataclass
class SubmissionResult:
    dataset: Dataset
    alerts: List[DuplicationAlert]

    @property
    def message(self) -> str:
        return "Potential duplicates detected" if self.alerts else "Dataset processed successfully"

    def to_dict(self) -> dict:
        return {
            "dataset": self.dataset.to_dict(),
            "alerts": [a.to_event() for a in self.alerts],
            "message": self.message,
        }


class DetectionService:

    def __init__(
        self,
        config: Optional[DDASConfig] = None,
        sink: Optional[AlertSink] = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.config = config or DDASConfig()
        self.clock = clock
        self.fingerprinter = DatasetFingerprinter(self.config.fingerprints)
        self.detector = DuplicationDetector(thresholds=self.config.detection.thresholds, clock=clock)
        self.alert_manager = AlertManager(clock=clock)
        self.sink = sink
        for subscription in self.config.alerts.subscriptions:
            self.alert_manager.subscribe(subscription)

        self.detector.add_listener(self.alert_manager.process_alert)
        if self.sink is not None:
            self.detector.add_listener(self.sink.emit)
        self._closed = False

    def __enter__(self) -> DetectionService:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def submit(self, payload: Mapping[str, Any]) -> SubmissionResult:
        """Fingerprint and register one dataset submission.

        Raises FingerprintError for malformed payloads; the registry is untouched.
        """
        submission = DatasetSubmission.from_dict(payload)
        return self.submit_submission(submission)

    def submit_submission(self, submission: DatasetSubmission) -> SubmissionResult:
        if self._closed:
            raise RuntimeError("DetectionService is closed")
        dataset = build_dataset(
            submission,
            self.fingerprinter,
            default_quality=self.config.detection.default_quality,
            clock=self.clock,
        )
        alerts = self.detector.add_dataset(dataset)
        return SubmissionResult(dataset=dataset, alerts=alerts)

    def alerts(self) -> List[DuplicationAlert]:
        return self.detector.get_alerts()

    def alerts_for(self, dataset_id: str) -> List[DuplicationAlert]:
        return self.detector.get_alerts_for_dataset(dataset_id)

    def prune(self, max_age_days: Optional[float] = None) -> int:
        days = self.config.detection.retention_days if max_age_days is None else max_age_days
        return self.detector.clear_old_alerts(days)

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        if self.sink is not None:
            paths = self.sink.flush()
            if paths:
                log.info(f"Flushed alerts to {len(paths)} parquet file(s) under {self.sink.alerts_dir}")
