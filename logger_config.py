"""
Logging configuration for the Carbon Footprint Calculator
Named loggers with structured helpers shared by the core, the CLI and the GUI
"""
import logging
import logging.handlers
import time
from pathlib import Path
from typing import Dict, Any, Optional

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def _format_context(context: Dict[str, Any]) -> str:
    if not context:
        return ''
    return ' | ' + ', '.join(f"{key}={value}" for key, value in context.items())


class CarbonLogger:
    """Thin wrapper around a stdlib logger with context-aware helpers"""

    def __init__(self, name: str, level: int = logging.INFO):
        self.logger = logging.getLogger(name)
        self.logger.setLevel(level)
        if not self.logger.handlers:
            handler = logging.StreamHandler()
            handler.setFormatter(logging.Formatter(LOG_FORMAT))
            self.logger.addHandler(handler)
        self.logger.propagate = False

    @property
    def name(self) -> str:
        return self.logger.name

    def debug(self, message: str, **context) -> None:
        self.logger.debug(message + _format_context(context))

    def info(self, message: str, **context) -> None:
        self.logger.info(message + _format_context(context))

    def warning(self, message: str, **context) -> None:
        self.logger.warning(message + _format_context(context))

    def error(self, message: str, exception: Optional[BaseException] = None, **context) -> None:
        if exception is not None:
            context['error'] = f"{type(exception).__name__}: {exception}"
        self.logger.error(message + _format_context(context))

    def log_processing_step(self, step: str, details: Optional[Dict[str, Any]] = None) -> None:
        """Log a named step of an export or load operation"""
        self.info(f"STEP: {step}", **(details or {}))

    def log_data_stats(self, stats: Dict[str, Any], prefix: str = "DATA") -> None:
        """Log a dictionary of counters on one line"""
        self.info(f"{prefix} STATS", **stats)

    def log_performance(self, operation: str, duration: float, records: Optional[int] = None) -> None:
        context = {'duration': f"{duration:.3f}s"}
        if records is not None:
            context['records'] = records
            if duration > 0:
                context['rate'] = f"{records / duration:.1f}/s"
        self.info(f"PERFORMANCE: {operation}", **context)

    def log_file_operation(self, operation: str, file_path: str, success: bool,
                           file_size: Optional[int] = None) -> None:
        context = {'path': file_path, 'success': success}
        if file_size is not None:
            context['size'] = file_size
        if success:
            self.info(f"FILE {operation.upper()}", **context)
        else:
            self.warning(f"FILE {operation.upper()} FAILED", **context)

    def log_validation_result(self, check: str, passed: bool, message: str = "") -> None:
        if passed:
            self.info(f"VALIDATION PASSED: {check}", detail=message)
        else:
            self.warning(f"VALIDATION FAILED: {check}", detail=message)

    def set_level(self, level: str) -> None:
        self.logger.setLevel(getattr(logging, level.upper(), logging.INFO))


class ProgressLogger:
    """Logs progress of a long loop in steps of ten percent"""

    def __init__(self, logger: CarbonLogger, total: int, operation: str):
        self.logger = logger
        self.total = max(int(total), 0)
        self.operation = operation
        self.current = 0
        self.start_time = time.time()
        self._last_reported = -1

    def update(self, increment: int = 1) -> None:
        self.current += increment
        if self.total <= 0:
            return
        percent = int(self.current * 100 / self.total)
        bucket = percent // 10
        if bucket > self._last_reported:
            self._last_reported = bucket
            self.logger.debug(f"{self.operation}: {self.current}/{self.total} ({percent}%)")

    def complete(self) -> None:
        duration = time.time() - self.start_time
        self.logger.log_performance(self.operation, duration, self.current)


def configure_file_logging(log_dir: str = "logs", level: str = "INFO",
                           max_bytes: int = 2 * 1024 * 1024, backup_count: int = 3) -> Path:
    """Attach a rotating file handler to every application logger"""
    log_path = Path(log_dir)
    log_path.mkdir(parents=True, exist_ok=True)
    log_file = log_path / "carbon_calculator.log"

    handler = logging.handlers.RotatingFileHandler(
        log_file, maxBytes=max_bytes, backupCount=backup_count, encoding='utf-8')
    handler.setFormatter(logging.Formatter(LOG_FORMAT))

    for carbon_logger in (main_logger, data_logger, gui_logger, storage_logger):
        already_attached = any(
            isinstance(h, logging.handlers.RotatingFileHandler)
            and Path(getattr(h, 'baseFilename', '')) == log_file.resolve()
            for h in carbon_logger.logger.handlers
        )
        if not already_attached:
            carbon_logger.logger.addHandler(handler)
        carbon_logger.set_level(level)

    return log_file


# Global logger instances
main_logger = CarbonLogger('carbon.main')
data_logger = CarbonLogger('carbon.data')
gui_logger = CarbonLogger('carbon.gui')
storage_logger = CarbonLogger('carbon.storage')
