"""
Structured logging for sponsorcheck.

Provides centralized logging with console and file outputs plus metrics
tracking for monitoring how often the page monitor checks, classifies,
retries and falls back.
"""

import json
import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional


class StructuredLogger:
    """
    Centralized logger with support for console and file outputs.
    Tracks metrics for the page monitor and renderers.
    """

    def __init__(
        self,
        name: str = "sponsorcheck",
        level: str = "INFO",
        log_dir: Optional[Path] = None,
        enable_file: bool = False,
        enable_console: bool = True,
    ):
        """
        Initialize the structured logger.

        Args:
            name: Logger name
            level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
            log_dir: Directory for log files (default: logs/)
            enable_file: Write logs to file
            enable_console: Output logs to console
        """
        self.logger = logging.getLogger(name)
        self.logger.setLevel(getattr(logging, level.upper()))
        self.logger.handlers.clear()

        self.metrics = {
            "checks": 0,
            "classifications": 0,
            "skipped_busy": 0,
            "extraction_retries": 0,
            "stale_results_discarded": 0,
            "render_fallbacks": 0,
            "errors_by_type": {},
            "verdicts_by_status": {},
        }

        if enable_console:
            console_handler = logging.StreamHandler(sys.stdout)
            console_handler.setLevel(getattr(logging, level.upper()))
            console_formatter = logging.Formatter(
                fmt='%(asctime)s | %(levelname)-8s | %(name)s | %(message)s',
                datefmt='%Y-%m-%d %H:%M:%S'
            )
            console_handler.setFormatter(console_formatter)
            self.logger.addHandler(console_handler)

        if enable_file:
            if log_dir is None:
                log_dir = Path("logs")
            log_dir.mkdir(parents=True, exist_ok=True)

            log_file = log_dir / f"sponsorcheck_{datetime.now().strftime('%Y%m%d')}.log"
            file_handler = logging.FileHandler(log_file, encoding='utf-8')
            file_handler.setLevel(logging.DEBUG)
            file_formatter = logging.Formatter(
                fmt='%(asctime)s | %(levelname)-8s | %(name)s:%(lineno)d | %(message)s',
                datefmt='%Y-%m-%d %H:%M:%S'
            )
            file_handler.setFormatter(file_formatter)
            self.logger.addHandler(file_handler)

    def debug(self, message: str, **kwargs):
        """Log debug message with optional context."""
        self._log(logging.DEBUG, message, kwargs)

    def info(self, message: str, **kwargs):
        """Log info message with optional context."""
        self._log(logging.INFO, message, kwargs)

    def warning(self, message: str, **kwargs):
        """Log warning message with optional context."""
        self._log(logging.WARNING, message, kwargs)

    def error(self, message: str, **kwargs):
        """Log error message with optional context."""
        self._log(logging.ERROR, message, kwargs)

    def _log(self, level: int, message: str, context: dict):
        if context:
            message = f"{message} | Context: {json.dumps(context, default=str)}"
        self.logger.log(level, message)

    # Metric tracking methods

    def record_check(self):
        """Increment the change-check counter."""
        self.metrics["checks"] += 1

    def record_classification(self, status: str):
        """Record a completed classification and its status."""
        self.metrics["classifications"] += 1
        by_status = self.metrics["verdicts_by_status"]
        by_status[status] = by_status.get(status, 0) + 1

    def record_skipped_busy(self):
        self.metrics["skipped_busy"] += 1

    def record_extraction_retry(self):
        self.metrics["extraction_retries"] += 1

    def record_stale_result(self):
        self.metrics["stale_results_discarded"] += 1

    def record_render_fallback(self):
        self.metrics["render_fallbacks"] += 1

    def record_error(self, error_type: str):
        """Record a failure swallowed at a callback boundary."""
        errors = self.metrics["errors_by_type"]
        errors[error_type] = errors.get(error_type, 0) + 1

    def get_metrics(self) -> dict:
        """Return a copy of the current metrics."""
        metrics_copy = dict(self.metrics)
        metrics_copy["errors_by_type"] = dict(self.metrics["errors_by_type"])
        metrics_copy["verdicts_by_status"] = dict(self.metrics["verdicts_by_status"])
        return metrics_copy

    def log_metrics_summary(self):
        """Log a summary of current metrics."""
        metrics = self.get_metrics()

        self.info("=== Page Monitor Metrics ===")
        self.info(f"Checks: {metrics['checks']}")
        self.info(f"Classifications: {metrics['classifications']}")
        self.info(
            f"Skipped while busy: {metrics['skipped_busy']}, "
            f"extraction retries: {metrics['extraction_retries']}, "
            f"stale results discarded: {metrics['stale_results_discarded']}"
        )

        if metrics["verdicts_by_status"]:
            self.info("Verdicts:")
            for status, count in metrics["verdicts_by_status"].items():
                self.info(f"  {status}: {count}")

        if metrics["errors_by_type"]:
            self.info("Error Types:")
            for error_type, count in metrics["errors_by_type"].items():
                self.info(f"  {error_type}: {count}")


_global_logger: Optional[StructuredLogger] = None


def get_logger(
    name: str = "sponsorcheck",
    level: str = "INFO",
    **kwargs
) -> StructuredLogger:
    """
    Get or create the global logger instance.

    Args:
        name: Logger name
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        **kwargs: Additional arguments passed to StructuredLogger

    Returns:
        StructuredLogger instance
    """
    global _global_logger

    if _global_logger is None:
        _global_logger = StructuredLogger(name=name, level=level, **kwargs)

    return _global_logger


def reset_logger():
    """Reset the global logger (useful for testing)."""
    global _global_logger
    _global_logger = None
