"""Detection metrics. Counters for what the registry saw and flagged."""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Dict, List


@dataclass
class DetectionMetrics:
    datasets_registered: int = 0
    comparisons: int = 0
    exact_shortcut_hits: int = 0
    exact_alerts: int = 0
    similar_alerts: int = 0
    potential_alerts: int = 0
    alerts_pruned: int = 0
    source_alert_counts: Dict[str, int] = field(default_factory=dict)
    top_duplicated_sources: List[tuple] = field(default_factory=list)

    @property
    def total_alerts(self) -> int:
        return self.exact_alerts + self.similar_alerts + self.potential_alerts

    @property
    def alert_rate_pct(self) -> float:
        if self.comparisons == 0:
            return 0.0
        return 100.0 * self.total_alerts / self.comparisons

    def record_comparison(self, shortcut: bool = False) -> None:
        self.comparisons += 1
        if shortcut:
            self.exact_shortcut_hits += 1

    def record_alert(self, alert_type: str, source: str) -> None:
        if alert_type == "exact":
            self.exact_alerts += 1
        elif alert_type == "similar":
            self.similar_alerts += 1
        elif alert_type == "potential":
            self.potential_alerts += 1
        self.source_alert_counts[source] = self.source_alert_counts.get(source, 0) + 1

    def compute_top_duplicated_sources(self, n: int = 20) -> None:
        self.top_duplicated_sources = sorted(
            self.source_alert_counts.items(),
            key=lambda x: -x[1],
        )[:n]

    def summary(self) -> str:
        self.compute_top_duplicated_sources()
        lines = [
            "=== Duplication Detection Metrics ===",
            f"Datasets registered: {self.datasets_registered}",
            f"Comparisons: {self.comparisons}",
            f"Exact shortcut hits: {self.exact_shortcut_hits}",
            f"Alerts: {self.total_alerts} ({self.alert_rate_pct:.2f}% of comparisons)",
            f"  exact: {self.exact_alerts}",
            f"  similar: {self.similar_alerts}",
            f"  potential: {self.potential_alerts}",
            f"Alerts pruned: {self.alerts_pruned}",
            "Top duplicated sources:",
        ]
        for src, cnt in self.top_duplicated_sources:
            lines.append(f"  {src}: {cnt}")
        return "\n".join(lines)
