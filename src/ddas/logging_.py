"""Logging utilities.

We use Python's standard `logging` module with one line format for every
`ddas.*` logger:

    2026-01-01T12:00:00 WARNING ddas.detection | exact alert ...

- Run logs go to `<log_dir>/<run_id>.log` (default `<out_dir>/logs`)
- The console handler writes to stderr so stdout stays free for reports
- Calling setup_logging again (next scan in the same process) replaces the
  handlers installed by the previous call
"""

from __future__ import annotations
import logging
import os
from typing import Optional

FORMAT = "%(asctime)s %(levelname)s %(name)s | %(message)s"
DATEFMT = "%Y-%m-%dT%H:%M:%S"

# requests logs every connection at DEBUG/INFO through urllib3
NOISY_LOGGERS = ("urllib3",)

_installed: list[logging.Handler] = []


def setup_logging(
    out_dir: str,
    run_id: str,
    log_dir: Optional[str] = None,
    level: int = logging.INFO,
    console_level: Optional[int] = None,
) -> str:
    """
    Setup logging for one run. Returns the log file path.

    Args:
        out_dir: Output directory of the run
        run_id: Run identifier, used as the log file name
        log_dir: Log directory (if None, uses out_dir/logs)
        level: Root log level and file handler level
        console_level: stderr handler level (defaults to `level`)
    """
    log_dir = log_dir or os.path.join(out_dir, "logs")
    os.makedirs(log_dir, exist_ok=True)
    log_path = os.path.join(log_dir, f"{run_id}.log")

    root = logging.getLogger()
    for handler in _installed:
        root.removeHandler(handler)
        handler.close()
    _installed.clear()
    root.setLevel(level)

    fmt = logging.Formatter(fmt=FORMAT, datefmt=DATEFMT)

    fh = logging.FileHandler(log_path, encoding="utf-8")
    fh.setLevel(level)
    fh.setFormatter(fmt)

    ch = logging.StreamHandler()
    ch.setLevel(console_level if console_level is not None else level)
    ch.setFormatter(fmt)

    for handler in (fh, ch):
        root.addHandler(handler)
        _installed.append(handler)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))
    return log_path
