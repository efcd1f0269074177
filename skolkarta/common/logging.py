"""JSON-lines logging with a stable schema."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from skolkarta.common.constants import JSON_LOG_FIELDS
from skolkarta.common.fs import ensure_dir
from skolkarta.common.time_utils import utc_timestamp_iso


class JsonLineFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {}
        for field in JSON_LOG_FIELDS:
            payload[field] = getattr(record, field, None)
        payload["timestamp"] = utc_timestamp_iso()
        payload["level"] = record.levelname
        payload["message"] = record.getMessage()
        return json.dumps(payload, ensure_ascii=False)


def build_logger(run_id: str, data_dir: Path, level: str = "INFO") -> logging.Logger:
    logger = logging.getLogger(f"skolkarta.{run_id}")
    logger.setLevel(level.upper())
    logger.propagate = False
    logger.handlers.clear()

    stream = logging.StreamHandler()
    stream.setFormatter(JsonLineFormatter())
    logger.addHandler(stream)

    log_path = data_dir / "run_meta" / f"{run_id}.log.jsonl"
    ensure_dir(log_path.parent)
    file_handler = logging.FileHandler(log_path, encoding="utf-8")
    file_handler.setFormatter(JsonLineFormatter())
    logger.addHandler(file_handler)

    return logger


def get_logger(name: str = "skolkarta") -> logging.Logger:
    """Fallback logger for callers that were not handed a run logger."""
    return logging.getLogger(name)


def log_event(logger: logging.Logger, message: str, *, level: int = logging.INFO, **event_fields: Any) -> None:
    logger.log(level, message, extra=event_fields)
