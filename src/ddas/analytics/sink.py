"""Alert sink: append-only Parquet export of duplication alerts.

Two storage layers:
1) Raw alert events: `alerts/date=.../alerts.parquet`
2) Aggregates per flush: `aggregates/alert_aggregates.parquet`
   (counts per tier + confidence p50/p90/p99)

Dashboards should read aggregates; raw events are for drill-down.
"""

from __future__ import annotations
from typing import Any, Dict, List
import os
import numpy as np
import pyarrow as pa
import pyarrow.parquet as pq
from datetime import datetime, timezone

from ..detection.schema import DuplicationAlert


def alerts_schema() -> pa.Schema:
    return pa.schema([
        ("run_id", pa.string()),
        ("id", pa.string()),
        ("type", pa.string()),
        ("confidence", pa.float64()),
        ("original_dataset_id", pa.string()),
        ("original_dataset_name", pa.string()),
        ("duplicate_dataset_id", pa.string()),
        ("duplicate_dataset_name", pa.string()),
        ("jaccard", pa.float64()),
        ("cosine", pa.float64()),
        ("structural", pa.float64()),
        ("semantic", pa.float64()),
        ("recommendation", pa.string()),
        ("created_at", pa.string()),
    ], metadata={"schema_version": "v1"})


def _percentiles(xs: List[float], ps=(50, 90, 99)) -> Dict[str, float]:
    if not xs:
        return {}
    arr = np.array(xs, dtype=np.float64)
    out = {}
    for p in ps:
        out[f"confidence_p{p}"] = float(np.percentile(arr, p))
    return out


def alert_row(alert: DuplicationAlert, run_id: str) -> Dict[str, Any]:
    sim = alert.similarities
    return {
        "run_id": run_id,
        "id": alert.id,
        "type": alert.type.value,
        "confidence": float(alert.confidence),
        "original_dataset_id": alert.original_dataset.id,
        "original_dataset_name": alert.original_dataset.name,
        "duplicate_dataset_id": alert.duplicate_dataset.id,
        "duplicate_dataset_name": alert.duplicate_dataset.name,
        "jaccard": float(sim.jaccard),
        "cosine": float(sim.cosine),
        "structural": float(sim.structural),
        "semantic": float(sim.semantic),
        "recommendation": alert.recommendation,
        "created_at": alert.created_at.isoformat(),
    }


class AlertSink:
    def __init__(self, out_dir: str, run_id: str):
        self.out_dir = out_dir
        self.run_id = run_id
        self.alerts_dir = os.path.join(out_dir, "alerts")
        self.aggs_dir = os.path.join(out_dir, "aggregates")
        os.makedirs(self.alerts_dir, exist_ok=True)
        os.makedirs(self.aggs_dir, exist_ok=True)
        self._pending: List[Dict[str, Any]] = []
        self.written = 0

    def emit(self, alert: DuplicationAlert) -> None:
        self._pending.append(alert_row(alert, self.run_id))

    def flush(self) -> List[str]:
        """Write pending alerts; returns the parquet paths touched."""
        if not self._pending:
            return []
        by_date: Dict[str, List[Dict[str, Any]]] = {}
        for row in self._pending:
            by_date.setdefault(row["created_at"][:10], []).append(row)

        paths = []
        for date, rows in sorted(by_date.items()):
            p = os.path.join(self.alerts_dir, f"date={date}", "alerts.parquet")
            self._append_parquet(p, rows, schema=alerts_schema())
            paths.append(p)

        agg = {
            "run_id": self.run_id,
            "flushed_at": datetime.now(timezone.utc).isoformat(),
            "alerts": len(self._pending),
            "exact": sum(1 for r in self._pending if r["type"] == "exact"),
            "similar": sum(1 for r in self._pending if r["type"] == "similar"),
            "potential": sum(1 for r in self._pending if r["type"] == "potential"),
        }
        agg.update(_percentiles([r["confidence"] for r in self._pending]))
        self._append_parquet(os.path.join(self.aggs_dir, "alert_aggregates.parquet"), [agg])

        self.written += len(self._pending)
        self._pending.clear()
        return paths

    def _append_parquet(self, path: str, rows: List[Dict[str, Any]], schema: pa.Schema | None = None) -> None:
        os.makedirs(os.path.dirname(path), exist_ok=True)
        table = pa.Table.from_pylist(rows, schema=schema)
        if os.path.exists(path) and os.path.getsize(path) > 0:
            existing = pq.read_table(path)
            if schema is None:
                table = pa.concat_tables([existing, table], promote_options="default")
            else:
                table = pa.concat_tables([existing.cast(schema), table])
        pq.write_table(table, path, compression="zstd")


def read_alerts(path: str) -> List[Dict[str, Any]]:
    """Read alert rows from a parquet file or a directory of date partitions."""
    if os.path.isdir(path):
        files = sorted(
            os.path.join(root, f)
            for root, _, names in os.walk(path)
            for f in names
            if f.endswith(".parquet")
        )
        rows: List[Dict[str, Any]] = []
        for f in files:
            rows.extend(pq.read_table(f).to_pylist())
        return rows
    return pq.read_table(path).to_pylist()
