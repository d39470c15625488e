"""File writers.

We keep writers simple and robust:
- append alert events to JSONL (append-only, one event per line)
- write a scan manifest at the end of a run
"""

from __future__ import annotations
from typing import List, Dict, Any
import os
import json


def append_jsonl(path: str, rows: List[Dict[str, Any]]) -> None:
    dirpath = os.path.dirname(path)
    if dirpath:
        os.makedirs(dirpath, exist_ok=True)
    with open(path, "a", encoding="utf-8") as f:
        for r in rows:
            f.write(json.dumps(r, ensure_ascii=False) + "\n")


def write_manifest(path: str, manifest: Dict[str, Any]) -> None:
    os.makedirs(os.path.dirname(path), exist_ok=True)
    tmp = path + ".tmp"
    with open(tmp, "w", encoding="utf-8") as f:
        json.dump(manifest, f, indent=2, ensure_ascii=False)
    os.replace(tmp, path)
