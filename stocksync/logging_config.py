"""Logging configuration for the stock sync.

Console output is for the operator watching a run. Every run also appends
to a daily JSONL file, one object per line, tagged with a run id so that
skipped cards and failed batches of a single run can be pulled out later:

    {"timestamp": ..., "run_id": "20240105T031500", "level": "WARNING",
     "logger": "stocksync.pipeline", "message": "card_skipped",
     "event_type": "card_skipped", "nm_id": 123, "reason": ...}
"""

import json
import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Iterator, Optional

__all__ = [
    "setup_logging",
    "get_logger",
    "log_sync_event",
    "read_sync_events",
    "daily_log_file",
    "LOG_DIR",
]

LOG_DIR = Path(__file__).parent.parent / "logs"

ROOT_LOGGER = "stocksync"


def new_run_id() -> str:
    return datetime.now().strftime("%Y%m%dT%H%M%S")


def daily_log_file(log_dir: Path = LOG_DIR, prefix: str = "sync", day: Optional[datetime] = None) -> Path:
    stamp = (day or datetime.now()).strftime("%Y%m%d")
    return Path(log_dir) / f"{prefix}_{stamp}.jsonl"


class JSONLFileHandler(logging.Handler):
    """Append records to <log_dir>/<prefix>_YYYYMMDD.jsonl."""

    def __init__(self, log_dir: Path, run_id: str, prefix: str = "sync"):
        super().__init__()
        self.log_dir = Path(log_dir)
        self.log_dir.mkdir(parents=True, exist_ok=True)
        self.run_id = run_id
        self.prefix = prefix

    def log_file(self) -> Path:
        return daily_log_file(self.log_dir, self.prefix)

    def emit(self, record: logging.LogRecord) -> None:
        try:
            entry: Dict[str, Any] = {
                "timestamp": datetime.fromtimestamp(record.created).isoformat(),
                "run_id": self.run_id,
                "level": record.levelname,
                "logger": record.name,
                "message": record.getMessage(),
            }
            event_type = getattr(record, "event_type", None)
            if event_type:
                entry["event_type"] = event_type
                entry.update(getattr(record, "extra_data", {}))

            with open(self.log_file(), "a", encoding="utf-8") as f:
                f.write(json.dumps(entry, ensure_ascii=False, default=str) + "\n")

        except Exception:
            self.handleError(record)


class ColoredConsoleHandler(logging.StreamHandler):
    """Console handler that colors the [LEVEL] tag on terminals."""

    COLORS = {
        "DEBUG": "\033[36m",      # Cyan
        "INFO": "\033[32m",       # Green
        "WARNING": "\033[33m",    # Yellow
        "ERROR": "\033[31m",      # Red
        "CRITICAL": "\033[35m",   # Magenta
    }
    RESET = "\033[0m"

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        if not (hasattr(self.stream, "isatty") and self.stream.isatty()):
            return message
        color = self.COLORS.get(record.levelname, "")
        tag = f"[{record.levelname}]"
        return message.replace(tag, f"[{color}{record.levelname}{self.RESET}]", 1)


def setup_logging(
    level: int = logging.INFO,
    log_to_file: bool = True,
    log_to_console: bool = True,
    log_dir: Optional[Path] = None,
    run_id: Optional[str] = None,
) -> logging.Logger:
    """Configure the stocksync logger for one run.

    Args:
        level: Console level; the JSONL file always gets DEBUG and up
        log_to_file: Whether to append to the daily JSONL file
        log_to_console: Whether to log to stdout
        log_dir: Custom log directory (default: project logs/)
        run_id: Tag for this run's file entries (default: start timestamp)

    Returns:
        The package root logger
    """
    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(logging.DEBUG if log_to_file else level)
    logger.handlers.clear()

    if log_to_console:
        console_handler = ColoredConsoleHandler(sys.stdout)
        console_handler.setLevel(level)
        console_handler.setFormatter(logging.Formatter(
            "%(asctime)s [%(levelname)s] %(message)s",
            datefmt="%H:%M:%S",
        ))
        logger.addHandler(console_handler)

    if log_to_file:
        file_handler = JSONLFileHandler(log_dir or LOG_DIR, run_id or new_run_id())
        file_handler.setLevel(logging.DEBUG)
        logger.addHandler(file_handler)

    return logger


def get_logger(name: str = ROOT_LOGGER) -> logging.Logger:
    """Get a logger under the stocksync namespace ('pipeline' -> 'stocksync.pipeline')."""
    if name == ROOT_LOGGER:
        return logging.getLogger(ROOT_LOGGER)
    return logging.getLogger(f"{ROOT_LOGGER}.{name}")


def log_sync_event(
    event_type: str,
    data: Dict[str, Any],
    level: int = logging.INFO,
    logger_name: str = ROOT_LOGGER,
) -> None:
    """Log a structured sync event.

    Args:
        event_type: e.g. 'card_skipped', 'batch_failed', 'run_complete'
        data: Event fields; an optional 'message' key becomes the log text
        level: Log level
        logger_name: Logger to use
    """
    logger = get_logger(logger_name)
    if not logger.isEnabledFor(level):
        return

    record = logger.makeRecord(
        logger.name,
        level,
        "(stocksync)",
        0,
        data.get("message", event_type),
        (),
        None,
    )
    record.event_type = event_type
    record.extra_data = {k: v for k, v in data.items() if k != "message"}

    logger.handle(record)


def read_sync_events(
    log_file: Path,
    event_type: Optional[str] = None,
    run_id: Optional[str] = None,
) -> Iterator[Dict[str, Any]]:
    """Yield structured events from a JSONL log, optionally filtered.

    Lines that are not valid JSON are skipped.
    """
    with open(log_file, "r", encoding="utf-8") as f:
        for line in f:
            line = line.strip()
            if not line:
                continue
            try:
                entry = json.loads(line)
            except json.JSONDecodeError:
                continue
            if "event_type" not in entry:
                continue
            if event_type is not None and entry["event_type"] != event_type:
                continue
            if run_id is not None and entry.get("run_id") != run_id:
                continue
            yield entry
