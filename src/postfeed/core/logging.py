"""Structured logging and append-only JSONL audit trail of API exchanges."""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

_MAX_FIELD_LEN = 10_000


def _truncate(value: Any) -> Any:
    """Truncate large strings, recursing into containers."""
    if isinstance(value, str):
        if len(value) > _MAX_FIELD_LEN:
            return value[:_MAX_FIELD_LEN] + f"... (truncated, {len(value)} total)"
        return value
    if isinstance(value, dict):
        return {k: _truncate(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_truncate(v) for v in value]
    return value


class AuditLogger:
    """Append-only JSONL audit logger."""

    def __init__(self, path: Path) -> None:
        self._path = path
        self._path.parent.mkdir(parents=True, exist_ok=True)

    @property
    def path(self) -> Path:
        return self._path

    def log(
        self,
        event_type: str,
        *,
        method: str = "",
        url: str = "",
        status_code: int = 0,
        request_body: dict[str, Any] | None = None,
        duration_ms: int = 0,
        error: str = "",
        extra: dict[str, Any] | None = None,
    ) -> None:
        entry: dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "event_type": event_type,
        }
        if method:
            entry["method"] = method
        if url:
            entry["url"] = url
        if status_code:
            entry["status_code"] = status_code
        if request_body:
            entry["request"] = _truncate(request_body)
        if duration_ms:
            entry["duration_ms"] = duration_ms
        if error:
            entry["error"] = _truncate(error)
        if extra:
            entry.update(_truncate(extra))

        with open(self._path, "a") as f:
            f.write(json.dumps(entry, default=str) + "\n")


def setup_logging(log_level: str = "INFO", app_log_path: Path | None = None) -> None:
    """Configure structured application logging."""
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]

    if app_log_path:
        app_log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(app_log_path)
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s %(name)s %(message)s")
        )
        handlers.append(file_handler)

    logging.basicConfig(
        level=getattr(logging, log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
        handlers=handlers,
        force=True,
    )
