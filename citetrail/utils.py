"""
CiteTrail Utilities
====================

Logging setup for the CLI, the config fingerprint, log previews of
citation text, and the JSON files the CLI reads and writes.
"""

from __future__ import annotations

import hashlib
import json
import logging
import sys
import time
import uuid
from pathlib import Path
from typing import Any


def generate_run_id() -> str:
    """Run id stamped on every log line of one CLI invocation: citetrail-{time}-{uuid8}."""
    return f"citetrail-{time.strftime('%Y%m%d-%H%M%S')}-{uuid.uuid4().hex[:8]}"


def compute_hash(data: dict, length: int = 16) -> str:
    """Truncated SHA-256 of a dict's canonical JSON (keys sorted)."""
    canonical = json.dumps(data, sort_keys=True, default=str)
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()[:length]


# ── Logging ────────────────────────────────────────────────────────

class JsonLogFormatter(logging.Formatter):
    """One JSON object per record, tagged with the run id when there is one."""

    def __init__(self, run_id: str | None = None):
        super().__init__()
        self.run_id = run_id

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": self.formatTime(record),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if self.run_id:
            entry["run_id"] = self.run_id
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, ensure_ascii=False)


def setup_logging(
    level: str = "INFO",
    format_style: str = "text",
    run_id: str | None = None
) -> logging.Logger:
    """
    Attach a single stderr handler to the "citetrail" logger.

    Every module logs under "citetrail.<area>.<module>", so this one
    handler covers extraction, enrichment and location alike. Calling it
    again replaces the handler instead of stacking another.

    Args:
        level: DEBUG, INFO, WARNING or ERROR; unknown names fall back to INFO.
        format_style: "json" for one object per line, anything else for text.
        run_id: Tag added to every line.
    """
    logger = logging.getLogger("citetrail")
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    logger.handlers.clear()

    handler = logging.StreamHandler(sys.stderr)
    if format_style == "json":
        handler.setFormatter(JsonLogFormatter(run_id))
    else:
        tag = f"{run_id} | " if run_id else ""
        handler.setFormatter(logging.Formatter(
            f"%(asctime)s | %(levelname)-8s | {tag}%(name)s | %(message)s",
            datefmt="%H:%M:%S",
        ))

    logger.addHandler(handler)
    return logger


def preview(text: str, limit: int = 40) -> str:
    """Shorten citation text for log messages."""
    return text if len(text) <= limit else text[:limit] + "..."


# ── CLI files ──────────────────────────────────────────────────────

def save_json(data: Any, path: str | Path) -> Path:
    """Write a citation block or run result as indented UTF-8 JSON."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, indent=2, ensure_ascii=False, default=str), encoding="utf-8")
    return path


def load_json(path: str | Path) -> Any:
    """Read a passages, pages, fragments or block file."""
    return json.loads(Path(path).read_text(encoding="utf-8"))
