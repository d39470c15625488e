"""Local JSONL submission source.

Each line is one dataset submission (see `ddas.datasets.submission`).

Supports multiple input formats:
- Single file: "path/to/file.jsonl"
- Multiple files: ["path/to/file1.jsonl", "path/to/file2.jsonl"]
- Directory: "path/to/directory/" (processes all .jsonl files, recursively)
- Glob pattern: "path/to/*.jsonl" or "path/to/**/*.jsonl"
"""

from __future__ import annotations
import glob
import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Iterable, List, Tuple, Union

log = logging.getLogger("ddas.datasets.local_jsonl")


class LocalJSONLSubmissions:

    def __init__(self, paths: Union[str, List[str]]):
        self.files = self._resolve_files(paths)

    def _resolve_files(self, paths: Union[str, List[str]]) -> List[str]:
        if isinstance(paths, (list, tuple)):
            files: List[str] = []
            for item in paths:
                files.extend(self._resolve_files(item))
            return files

        if "*" in paths or "?" in paths or "[" in paths:
            matched = glob.glob(paths, recursive=True)
            return sorted(f for f in matched if os.path.isfile(f) and f.endswith(".jsonl"))

        path = Path(paths)
        if path.is_dir():
            return sorted(str(f) for f in path.glob("**/*.jsonl") if f.is_file())

        # Missing files are kept and reported when streamed
        return [str(path)]

    def metadata(self) -> Dict[str, Any]:
        return {
            "kind": "local_jsonl",
            "files": self.files,
            "file_count": len(self.files),
            "total_size_bytes": sum(os.path.getsize(f) for f in self.files if os.path.exists(f)),
        }

    def stream(self) -> Iterable[Tuple[str, Dict[str, Any]]]:
        """Yield (location, payload) for each submission line; location is `file:line`."""
        for file_path in self.files:
            if not os.path.exists(file_path):
                log.warning(f"File not found: {file_path}, skipping")
                continue
            with open(file_path, "r", encoding="utf-8") as f:
                for line_num, line in enumerate(f, start=1):
                    line = line.strip()
                    if not line:
                        continue
                    try:
                        payload = json.loads(line)
                    except json.JSONDecodeError as e:
                        log.warning(f"Invalid JSON in {file_path}:{line_num}: {e}")
                        continue
                    yield f"{file_path}:{line_num}", payload
