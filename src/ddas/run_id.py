"""Run ID resolution: explicit or auto-generated from config.

Auto-generation uses:
- prefix_digits / suffix_digits: first/last N digits of a compact timestamp
- include_input_name: name derived from the first input path
"""

from __future__ import annotations
import os
import re
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional


def _timestamp_digits(prefix: int = 8, suffix: int = 6) -> tuple[str, str]:
    """Compact timestamp YYYYMMDDHHMMSS; return (first prefix_digits, last suffix_digits)."""
    ts = datetime.now(timezone.utc).strftime("%Y%m%d%H%M%S")
    a = ts[: min(prefix, len(ts))]
    b = ts[-min(suffix, len(ts)) :] if suffix else ""
    return (a, b)


def _input_name(inputs: Optional[List[str]]) -> str:
    if not inputs:
        return "scan"
    raw = os.path.normpath(str(inputs[0]))
    name = os.path.splitext(os.path.basename(raw))[0] or "scan"
    name = re.sub(r"[^\w\-]", "_", name)
    return name or "scan"


def generate_run_id(auto_cfg: Dict[str, Any], inputs: Optional[List[str]] = None) -> str:
    """Build run_id from run.run_id_auto config.

    auto_cfg may contain:
    - prefix_digits: first N digits of timestamp (default 8 -> date)
    - suffix_digits: last N digits of timestamp (default 6 -> time)
    - include_input_name: bool, prefix with the first input's file name (default True)
    - separator: string between parts (default "_")
    """
    prefix_digits = int(auto_cfg.get("prefix_digits", 8))
    suffix_digits = int(auto_cfg.get("suffix_digits", 6))
    include_input_name = auto_cfg.get("include_input_name", True)
    separator = str(auto_cfg.get("separator", "_"))

    parts: list[str] = []
    if include_input_name:
        parts.append(_input_name(inputs))
    pre, suf = _timestamp_digits(prefix_digits, suffix_digits)
    if pre:
        parts.append(pre)
    if suf:
        parts.append(suf)
    return separator.join(parts) if parts else "scan"


def resolve_run_id(run: Dict[str, Any], inputs: Optional[List[str]] = None) -> str:
    """Return run_id: explicit run.run_id, or auto-generated from run.run_id_auto, or 'scan'."""
    explicit = run.get("run_id")
    if explicit is not None and str(explicit).strip():
        return str(explicit).strip()
    auto_cfg = run.get("run_id_auto")
    if auto_cfg is None:
        auto_cfg = {}
    if isinstance(auto_cfg, dict) and auto_cfg.get("enabled", True):
        return generate_run_id(auto_cfg, inputs)
    return "scan"


def resolve_out_dir(run: Dict[str, Any], run_id: str) -> str:
    """Return out_dir with {run_id} placeholder replaced by the resolved run_id."""
    out_dir = run.get("out_dir") or "storage/{run_id}"
    return out_dir.replace("{run_id}", run_id)
