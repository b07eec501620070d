"""
component_1_logging_config.py

Central logging setup for the gripper planner.
Provides structured log output with consistent formatting across components.

Features:
- Console logging, optional rotating file logging
- Structured formatting: timestamp, level, component name, key=value extras
- Performance tracking for search runs (separate "gripper.performance" logger)
- Exception logging with full traceback and context

Usage:
    from component_1_logging_config import get_logger

    logger = get_logger(__name__)
    logger.info("Search started", extra={"columns": 5, "entities": 9})
"""

import logging
import logging.handlers
import sys
import traceback
from datetime import datetime
from pathlib import Path
from types import TracebackType
from typing import Any, Dict, Literal, MutableMapping, Optional, Tuple, Type

PERFORMANCE_LOGGER_NAME: str = "gripper.performance"

CONSOLE_LOG_LEVEL: int = logging.INFO
FILE_LOG_LEVEL: int = logging.DEBUG


class PlannerLogFormatter(logging.Formatter):
    """
    Formatter for structured planner log lines.
    Appends extra context as ``key=value`` pairs and optionally colours console output.
    """

    COLORS: Dict[str, str] = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[35m",
        "RESET": "\033[0m",
    }

    def __init__(self, use_colors: bool = False, include_extra: bool = True) -> None:
        self.use_colors: bool = use_colors
        self.include_extra: bool = include_extra

        # [TIMESTAMP] [LEVEL] [COMPONENT] MESSAGE
        fmt = "[%(asctime)s] [%(levelname)-8s] [%(name)s] %(message)s"
        super().__init__(fmt=fmt, datefmt="%Y-%m-%d %H:%M:%S")

    def format(self, record: logging.LogRecord) -> str:
        log_message = super().format(record)

        if self.include_extra and hasattr(record, "extra_info"):
            extra_str = " | ".join(f"{k}={v}" for k, v in record.extra_info.items())
            if extra_str:
                log_message += f" | {extra_str}"

        if self.use_colors:
            color = self.COLORS.get(record.levelname, self.COLORS["RESET"])
            reset = self.COLORS["RESET"]
            log_message = f"{color}{log_message}{reset}"

        return log_message


class PerformanceLogger:
    """
    Context manager timing a planner operation.

    Usage:
        with PerformanceLogger(logger, "plan", columns=5):
            planner.plan(formula, state)
    """

    def __init__(
        self, logger: logging.Logger, operation_name: str, **context: Any
    ) -> None:
        self.logger: logging.Logger = logger
        self.operation_name: str = operation_name
        self.context: Dict[str, Any] = context
        self.start_time: Optional[datetime] = None
        self.duration_ms: Optional[float] = None

    def __enter__(self) -> "PerformanceLogger":
        self.start_time = datetime.now()
        self.logger.debug(
            f"START: {self.operation_name}", extra={"extra_info": self.context}
        )
        return self

    def __exit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc_val: Optional[BaseException],
        exc_tb: Optional[TracebackType],
    ) -> Literal[False]:
        assert self.start_time is not None, "PerformanceLogger used outside 'with'"
        self.duration_ms = (datetime.now() - self.start_time).total_seconds() * 1000

        if exc_type is None:
            self.logger.debug(
                f"END: {self.operation_name} (duration: {self.duration_ms:.2f}ms)",
                extra={"extra_info": {**self.context, "duration_ms": self.duration_ms}},
            )
            logging.getLogger(PERFORMANCE_LOGGER_NAME).info(
                f"{self.operation_name}: {self.duration_ms:.2f}ms",
                extra={"extra_info": {**self.context, "duration_ms": self.duration_ms}},
            )
        else:
            # Planning failures are expected outcomes, not crashes
            self.logger.warning(
                f"FAILED: {self.operation_name} (duration: {self.duration_ms:.2f}ms)",
                extra={
                    "extra_info": {
                        **self.context,
                        "duration_ms": self.duration_ms,
                        "error": type(exc_val).__name__,
                    }
                },
            )

        return False


class StructuredLogger(logging.LoggerAdapter):
    """
    Logger adapter that stores ``extra=`` dicts as ``extra_info`` on the record.
    """

    def process(
        self, msg: str, kwargs: MutableMapping[str, Any]
    ) -> Tuple[str, MutableMapping[str, Any]]:
        extra = kwargs.get("extra", {})
        if extra:
            kwargs["extra"] = {"extra_info": extra}
        return msg, kwargs

    def log_exception(self, exc: Exception, message: str = "", **context: Any) -> None:
        """Log an exception with traceback and context."""
        tb_str = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))

        self.error(
            f"{message}: {type(exc).__name__}: {str(exc)}\n{tb_str}", extra=context
        )


def setup_logging(
    console_level: int = CONSOLE_LOG_LEVEL,
    file_level: int = FILE_LOG_LEVEL,
    log_file: Optional[Path] = None,
    enable_performance_logging: bool = True,
) -> None:
    """
    Configure the root logger for the planner.

    Args:
        console_level: Level for console output
        file_level: Level for file output
        log_file: Main log file; file logging is disabled when None
        enable_performance_logging: Also write "gripper.performance" records
            next to the main log file
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(console_level)
    console_handler.setFormatter(
        PlannerLogFormatter(use_colors=sys.stdout.isatty(), include_extra=True)
    )
    root_logger.addHandler(console_handler)

    perf_logger = logging.getLogger(PERFORMANCE_LOGGER_NAME)
    perf_logger.handlers.clear()

    if log_file is not None:
        log_file = Path(log_file)
        log_file.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.handlers.RotatingFileHandler(
            log_file, maxBytes=10 * 1024 * 1024, backupCount=5, encoding="utf-8"
        )
        file_handler.setLevel(file_level)
        file_handler.setFormatter(PlannerLogFormatter(use_colors=False))
        root_logger.addHandler(file_handler)

        if enable_performance_logging:
            perf_logger.setLevel(logging.INFO)
            perf_logger.propagate = False

            perf_handler = logging.handlers.RotatingFileHandler(
                log_file.with_name(f"{log_file.stem}_performance.log"),
                maxBytes=5 * 1024 * 1024,
                backupCount=3,
                encoding="utf-8",
            )
            perf_handler.setFormatter(PlannerLogFormatter(use_colors=False))
            perf_logger.addHandler(perf_handler)

    get_logger("gripper.logging_config").info(
        "Logging initialised",
        extra={
            "console_level": logging.getLevelName(console_level),
            "file_level": logging.getLevelName(file_level),
            "log_file": str(log_file) if log_file else None,
            "performance_logging": enable_performance_logging,
        },
    )


def get_logger(name: str) -> StructuredLogger:
    """
    Create a structured logger for a component.

    Args:
        name: Component name (usually __name__)

    Returns:
        StructuredLogger instance

    Example:
        logger = get_logger(__name__)
        logger.info("Plan found", extra={"length": 7})
    """
    return StructuredLogger(logging.getLogger(name), {})
