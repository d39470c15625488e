"""CLI entrypoint.

Commands:
- `ddas scan --config configs/ddas.yaml submissions.jsonl [more.jsonl | dir/ | "glob/*.jsonl"]`
- `ddas fingerprint submission.json`
- `ddas alerts storage/<run_id>/alerts [--type exact]`

`scan` registers every submission in order, so each dataset is compared
against all datasets earlier in the input. Malformed submissions are logged
and counted as rejected; they never reach the registry.
"""

from __future__ import annotations
import argparse
import json
import logging
import os
import sys
from typing import List, Optional

from rich.console import Console
from tqdm import tqdm

from .analytics.sink import AlertSink, alert_row, read_alerts
from .config import DDASConfig
from .datasets.local_jsonl import LocalJSONLSubmissions
from .datasets.submission import DatasetSubmission
from .fingerprints.generator import DatasetFingerprinter
from .fingerprints.schema import FingerprintError
from .logging_ import setup_logging
from .monitor.report import render_alerts
from .run_id import resolve_out_dir, resolve_run_id
from .service import DetectionService
from .storage.writer import write_manifest

log = logging.getLogger("ddas.cli")


def _scan(args: argparse.Namespace) -> int:
    cfg = DDASConfig.load(args.config)
    run = dict(cfg.run)
    if args.run_id:
        run["run_id"] = args.run_id
    if args.out_dir:
        run["out_dir"] = args.out_dir
    run_id = resolve_run_id(run, args.inputs)
    out_dir = resolve_out_dir(run, run_id)
    setup_logging(
        out_dir=out_dir,
        run_id=run_id,
        log_dir=run.get("log_dir"),
        console_level=logging.WARNING if args.quiet else None,
    )

    source = LocalJSONLSubmissions(args.inputs)
    log.info(f"Scan {run_id}: {source.metadata()['file_count']} input file(s) -> {out_dir}")

    sink = AlertSink(out_dir=out_dir, run_id=run_id) if cfg.alerts.parquet else None
    submitted = 0
    rejected = 0
    with DetectionService(cfg, sink=sink) as service:
        for location, payload in tqdm(source.stream(), desc="datasets", unit="ds", disable=args.quiet):
            try:
                service.submit(payload)
                submitted += 1
            except FingerprintError as e:
                rejected += 1
                log.warning(f"Rejected submission at {location}: {e}")
        alerts = service.alerts()
        metrics = service.detector.metrics

    console = Console()
    render_alerts([alert_row(a, run_id) for a in alerts], console=console, title=f"Duplication Alerts ({run_id})")
    console.print(metrics.summary())

    write_manifest(os.path.join(out_dir, "manifests", f"{run_id}.json"), {
        "run_id": run_id,
        "inputs": source.metadata(),
        "datasets_submitted": submitted,
        "datasets_rejected": rejected,
        "alerts": len(alerts),
        "alerts_by_type": {
            "exact": metrics.exact_alerts,
            "similar": metrics.similar_alerts,
            "potential": metrics.potential_alerts,
        },
        "comparisons": metrics.comparisons,
        "thresholds": {
            "exact": cfg.detection.thresholds.exact,
            "similar": cfg.detection.thresholds.similar,
            "potential": cfg.detection.thresholds.potential,
        },
        "fingerprint_version": cfg.fingerprints.fingerprint_version,
    })
    return 0


def _fingerprint(args: argparse.Namespace) -> int:
    cfg = DDASConfig.load(args.config)
    with open(args.path, "r", encoding="utf-8") as f:
        payload = json.load(f)
    submission = DatasetSubmission.from_dict(payload)
    fp = DatasetFingerprinter(cfg.fingerprints).fingerprint(submission.content, submission.resolve_schema())
    out = fp.to_dict()
    if not args.bloom:
        out.pop("bloom_filter", None)
    print(json.dumps(out, indent=2))
    return 0


def _alerts(args: argparse.Namespace) -> int:
    rows = read_alerts(args.path)
    if args.type:
        rows = [r for r in rows if r.get("type") == args.type]
    render_alerts(rows, title=f"Duplication Alerts ({args.path})")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    p = argparse.ArgumentParser(prog="ddas", description="Dataset duplication alert system")
    sub = p.add_subparsers(dest="cmd", required=True)

    ps = sub.add_parser("scan", help="Fingerprint and register submissions, report duplicates")
    ps.add_argument("inputs", nargs="+", help="JSONL files, directories or glob patterns")
    ps.add_argument("--config", default=None, help="YAML config (default: built-in defaults)")
    ps.add_argument("--run-id", default=None)
    ps.add_argument("--out-dir", default=None, help="Output directory; {run_id} is substituted")
    ps.add_argument("--quiet", "-q", action="store_true", help="Hide the progress bar and INFO logs on stderr")

    pf = sub.add_parser("fingerprint", help="Print the fingerprint of one submission (JSON file)")
    pf.add_argument("path")
    pf.add_argument("--config", default=None)
    pf.add_argument("--bloom", action="store_true", help="Include the bloom filter bit string")

    pa = sub.add_parser("alerts", help="Show alerts stored by a previous scan")
    pa.add_argument("path", help="alerts.parquet file or an alerts/ directory")
    pa.add_argument("--type", choices=["exact", "similar", "potential"], default=None)

    args = p.parse_args(argv)

    try:
        if args.cmd == "scan":
            return _scan(args)
        if args.cmd == "fingerprint":
            return _fingerprint(args)
        return _alerts(args)
    except (FingerprintError, ValueError, OSError) as e:
        print(f"ddas {args.cmd}: error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
