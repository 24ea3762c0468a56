"""
Logging Utilities for cchunker

Process diagnostics go through the standard logging module (stderr). A
DispatchLog can additionally record every processor invocation to disk so a
supervising backup tool can audit a run afterwards.

Author: Olivier Vitrac, PhD, HDR | olivier.vitrac@adservio.fr | Adservio | 2025-11-24
"""

import json
import logging
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional, Sequence

LOG_FORMAT = "%(levelname)s: %(name)s: %(message)s"


class LogLevel(str, Enum):
    """Log levels accepted in configuration and on the command line."""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"


def setup_logging(level: str = "WARNING") -> None:
    """Configure root logging on stderr; stdout stays reserved for data."""
    name = LogLevel(level.upper()).value
    logging.basicConfig(level=name, format=LOG_FORMAT)
    logging.getLogger().setLevel(name)


def _utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


class DispatchLog:
    """
    File-based record of chunk dispatches with structured JSONL support.

    Logs are written to:
    - {log_dir}/dispatch.log - Human-readable text log
    - {log_dir}/events.jsonl - Structured JSONL log
    """

    def __init__(self, log_dir: Path, min_level: LogLevel = LogLevel.INFO):
        self.log_dir = Path(log_dir)
        self.log_dir.mkdir(parents=True, exist_ok=True)
        self.min_level = min_level

        self.text_log = self.log_dir / "dispatch.log"
        self.json_log = self.log_dir / "events.jsonl"

    def _should_log(self, level: LogLevel) -> bool:
        levels = [LogLevel.DEBUG, LogLevel.INFO, LogLevel.WARNING, LogLevel.ERROR]
        return levels.index(level) >= levels.index(self.min_level)

    def log_text(self, line: str, level: LogLevel = LogLevel.INFO):
        """Append a timestamped line to the text log."""
        if not self._should_log(level):
            return
        with self.text_log.open("a", encoding="utf-8") as f:
            f.write(f"[{_utc_timestamp()}] [{level.value}] {line}\n")

    def log_jsonl(self, event_type: str, data: Dict[str, Any], level: LogLevel = LogLevel.INFO):
        """Append a structured event to the JSONL log."""
        if not self._should_log(level):
            return
        event = {
            "timestamp": _utc_timestamp(),
            "level": level.value,
            "type": event_type,
            "data": data,
        }
        with self.json_log.open("a", encoding="utf-8") as f:
            f.write(json.dumps(event) + "\n")

    def log_dispatch(
        self,
        command: Sequence[str],
        chunk_index: int,
        chunk_length: int,
        returncode: int,
        duration_ms: Optional[float] = None,
        output_bytes: Optional[int] = None,
    ):
        """
        Record one processor invocation.

        Args:
            command: Processor argv
            chunk_index: Index of the chunk in its level
            chunk_length: Chunk size in bytes
            returncode: Processor exit status
            duration_ms: Wall time of the invocation
            output_bytes: Captured stdout size (capture mode only)
        """
        summary = f'CMD="{" ".join(command)}" CHUNK={chunk_index} LEN={chunk_length} RC={returncode}'
        if duration_ms is not None:
            summary += f" DURATION={duration_ms:.1f}ms"

        level = LogLevel.ERROR if returncode != 0 else LogLevel.INFO
        self.log_text(summary, level)

        data: Dict[str, Any] = {
            "command": list(command),
            "chunk_index": chunk_index,
            "chunk_length": chunk_length,
            "returncode": returncode,
        }
        if duration_ms is not None:
            data["duration_ms"] = duration_ms
        if output_bytes is not None:
            data["output_bytes"] = output_bytes
        self.log_jsonl("dispatch", data, level)

    def log_level(self, iteration: int, chunk_count: int, summary_size: int):
        """Record the end of one reduction level."""
        self.log_text(f"LEVEL={iteration} CHUNKS={chunk_count} SUMMARY={summary_size}B")
        self.log_jsonl("level", {
            "iteration": iteration,
            "chunk_count": chunk_count,
            "summary_size": summary_size,
        })
