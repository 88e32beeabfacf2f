"""
Structured logging system for refpay.

Console and daily file output over the standard logging module. Context
passed as keyword arguments is appended to the message as JSON, and a small
set of counters tracks match quality and payroll activity for the session.
"""

import json
import logging
import os
import sys
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional

CONSOLE_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
FILE_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s:%(lineno)d | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def _level(name: str) -> int:
    return getattr(logging, name.upper())


def _console_handler(level: str) -> logging.Handler:
    # stderr, so command output on stdout stays clean
    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(_level(level))
    handler.setFormatter(logging.Formatter(fmt=CONSOLE_FORMAT, datefmt=DATE_FORMAT))
    return handler


class _DailyFileHandler(logging.FileHandler):
    """Creates the directory and opens the day's file on the first record."""

    def __init__(self, log_dir: Path):
        self.log_dir = log_dir
        super().__init__(log_dir / f"refpay_{datetime.now():%Y%m%d}.log", encoding="utf-8", delay=True)

    def _open(self):
        self.log_dir.mkdir(parents=True, exist_ok=True)
        return super()._open()


def _file_handler(log_dir: Path) -> logging.Handler:
    """One file per day; the file always receives DEBUG and up."""
    handler = _DailyFileHandler(log_dir)
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(logging.Formatter(fmt=FILE_FORMAT, datefmt=DATE_FORMAT))
    return handler


def _fresh_metrics() -> Dict[str, Any]:
    return {
        "names_resolved": 0,
        "cache_hits": 0,
        "low_confidence": 0,
        "confirmations": {"manual": 0, "auto": 0},
        "referees_computed": 0,
        "batches_saved": 0,
        "errors_by_type": {},
    }


class StructuredLogger:
    """
    Session logger shared by the resolver, payroll and repository layers.

    Args:
        name: Logger name
        level: Console level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_dir: Directory for daily log files (default: logs/)
        enable_file: Write logs to file
        enable_console: Output logs to console
    """

    def __init__(
        self,
        name: str = "refpay",
        level: str = "INFO",
        log_dir: Optional[Path] = None,
        enable_file: bool = True,
        enable_console: bool = True,
    ):
        self.logger = logging.getLogger(name)
        self.metrics = _fresh_metrics()
        self.enable_file = enable_file
        self.enable_console = enable_console
        self.configure(level, log_dir)

    def configure(self, level: str = "INFO", log_dir: Optional[Path] = None):
        """Rebuild the handlers, keeping the session counters."""
        for handler in self.logger.handlers:
            handler.close()
        self.logger.handlers.clear()
        self.logger.setLevel(_level(level))

        if self.enable_console:
            self.logger.addHandler(_console_handler(level))
        if self.enable_file:
            self.logger.addHandler(_file_handler(log_dir or Path("logs")))

    def log(self, level: int, message: str, **context):
        if context:
            message = f"{message} | Context: {json.dumps(context, default=str, ensure_ascii=False)}"
        self.logger.log(level, message)

    def debug(self, message: str, **context):
        self.log(logging.DEBUG, message, **context)

    def info(self, message: str, **context):
        self.log(logging.INFO, message, **context)

    def warning(self, message: str, **context):
        self.log(logging.WARNING, message, **context)

    def error(self, message: str, **context):
        self.log(logging.ERROR, message, **context)

    # Session counters

    def record_match(self, from_storage: bool, needs_review: bool):
        self.metrics["names_resolved"] += 1
        self.metrics["cache_hits"] += int(from_storage)
        self.metrics["low_confidence"] += int(needs_review)

    def record_confirmation(self, manual: bool):
        self.metrics["confirmations"]["manual" if manual else "auto"] += 1

    def record_payroll(self, referees: int):
        self.metrics["referees_computed"] += referees

    def record_batch_saved(self):
        self.metrics["batches_saved"] += 1

    def record_error(self, error_type: str):
        errors = self.metrics["errors_by_type"]
        errors[error_type] = errors.get(error_type, 0) + 1

    def get_metrics(self) -> dict:
        """Counters plus the cache hit rate once anything has been resolved."""
        snapshot = dict(self.metrics)
        if snapshot["names_resolved"]:
            snapshot["cache_hit_rate"] = round(snapshot["cache_hits"] / snapshot["names_resolved"], 3)
        return snapshot

    def log_metrics_summary(self):
        m = self.get_metrics()
        self.info("=== Payroll Session Metrics ===")
        self.info(
            f"Names resolved: {m['names_resolved']} "
            f"(cache hits: {m['cache_hits']}, needs review: {m['low_confidence']})"
        )
        self.info(f"Confirmations: {m['confirmations']['manual']} manual, {m['confirmations']['auto']} auto")
        self.info(f"Referees computed: {m['referees_computed']}, batches saved: {m['batches_saved']}")
        for error_type, count in m["errors_by_type"].items():
            self.info(f"  {error_type}: {count}")


_global_logger: Optional[StructuredLogger] = None


def get_logger(name: str = "refpay", level: Optional[str] = None, **kwargs) -> StructuredLogger:
    """
    Get or create the process-wide logger.

    Level defaults to REFPAY_LOG_LEVEL (or INFO) and the file directory to
    REFPAY_LOG_DIR (or logs/). Arguments only apply on first creation.
    No file is opened until something is logged, so callers that load .env
    later can still redirect output with configure().
    """
    global _global_logger

    if _global_logger is None:
        if "log_dir" not in kwargs and os.getenv("REFPAY_LOG_DIR"):
            kwargs["log_dir"] = Path(os.environ["REFPAY_LOG_DIR"])
        _global_logger = StructuredLogger(name=name, level=level or os.getenv("REFPAY_LOG_LEVEL", "INFO"), **kwargs)

    return _global_logger


def reset_logger():
    """Drop the process-wide logger so the next get_logger() builds a new one."""
    global _global_logger
    _global_logger = None
