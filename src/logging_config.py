"""
Logging Configuration for the Playoff Standings Engine

Engine modules never configure logging themselves. Each owns a module
logger (``logging.getLogger(__name__)``) and the host application picks
a setup here once at startup.

Usage Example:
    from logging_config import setup_logging, get_logger

    setup_logging(level="INFO", log_dir="logs", enable_console=True)

    logger = get_logger(__name__)
    logger.info("Standings recalculated")

Log Files Created (each rotates at 10MB, 5 backups):
- logs/standings_engine.log: INFO and above
- logs/standings_engine_debug.log: everything, including every
  tiebreaker step that separated teams
- logs/standings_engine_error.log: ERROR and above
"""

import logging
import logging.handlers
import os
from pathlib import Path
from typing import Any, Dict, Optional


DETAILED_FORMAT = (
    "%(asctime)s - %(name)s - %(levelname)s - "
    "[%(filename)s:%(lineno)d] - %(funcName)s() - %(message)s"
)
SIMPLE_FORMAT = "%(asctime)s - %(levelname)s - %(name)s - %(message)s"
CONSOLE_FORMAT = "%(levelname)s - %(name)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

LOG_FILE_PREFIX = "standings_engine"

# (file suffix, minimum level, always detailed)
LOG_FILES = (
    ("", logging.INFO, False),
    ("_debug", logging.DEBUG, True),
    ("_error", logging.ERROR, True),
)

# Top-level packages that make up the engine
ENGINE_PACKAGES = (
    "team_registry",
    "standings",
    "playoff_system",
    "offseason",
)

TIEBREAKER_LOGGER = "playoff_system.tiebreakers"

# Preset name -> setup_logging keyword arguments
PRESETS: Dict[str, Dict[str, Any]] = {
    "production": {"level": "INFO", "enable_console": False, "enable_file": True, "format_style": "simple"},
    "development": {"level": "DEBUG", "enable_console": True, "enable_file": True, "format_style": "detailed"},
    "testing": {"level": "WARNING", "enable_console": True, "enable_file": False, "format_style": "simple"},
}


def _parse_level(level: str) -> int:
    numeric_level = logging.getLevelName(level.upper())
    if not isinstance(numeric_level, int):
        raise ValueError(f"Unknown log level: {level}")
    return numeric_level


class ColoredFormatter(logging.Formatter):
    """
    Console formatter that colors the level name.

    The record's levelname is put back after formatting so file handlers
    that see the same record write plain text.
    """

    COLORS = {
        'DEBUG': '\033[36m',      # Cyan
        'INFO': '\033[32m',       # Green
        'WARNING': '\033[33m',    # Yellow
        'ERROR': '\033[31m',      # Red
        'CRITICAL': '\033[35m',   # Magenta
    }
    RESET = '\033[0m'

    def format(self, record):
        color = self.COLORS.get(record.levelname)
        if color is None:
            return super().format(record)

        plain = record.levelname
        record.levelname = f"{color}{plain}{self.RESET}"
        try:
            return super().format(record)
        finally:
            record.levelname = plain


def _file_handler(log_dir: str, suffix: str, level: int, log_format: str,
                  max_bytes: int, backup_count: int) -> logging.Handler:
    handler = logging.handlers.RotatingFileHandler(
        filename=os.path.join(log_dir, f"{LOG_FILE_PREFIX}{suffix}.log"),
        maxBytes=max_bytes,
        backupCount=backup_count,
        encoding='utf-8'
    )
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(log_format, datefmt=DATE_FORMAT))
    return handler


def setup_logging(
    level: str = "INFO",
    log_dir: str = "logs",
    enable_console: bool = True,
    enable_file: bool = True,
    max_bytes: int = 10 * 1024 * 1024,
    backup_count: int = 5,
    format_style: str = "detailed"
) -> None:
    """
    Configure the root logger for an application embedding the engine.

    Any handlers already on the root logger are removed and closed, so
    calling this twice does not duplicate output.

    Args:
        level: Minimum level name (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_dir: Directory for the rotating log files
        enable_console: Attach a colored stderr handler
        enable_file: Attach the three rotating file handlers
        max_bytes: Size at which a log file rotates
        backup_count: Rotated files kept per log
        format_style: "detailed" or "simple" for the main log file

    Raises:
        ValueError: If level is not a logging level name
    """
    numeric_level = _parse_level(level)

    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)
        handler.close()

    if enable_console:
        console_handler = logging.StreamHandler()
        console_handler.setLevel(numeric_level)
        console_handler.setFormatter(ColoredFormatter(CONSOLE_FORMAT, datefmt=DATE_FORMAT))
        root_logger.addHandler(console_handler)

    if enable_file:
        Path(log_dir).mkdir(parents=True, exist_ok=True)
        main_format = DETAILED_FORMAT if format_style == "detailed" else SIMPLE_FORMAT
        for suffix, file_level, detailed in LOG_FILES:
            root_logger.addHandler(_file_handler(
                log_dir, suffix, file_level,
                DETAILED_FORMAT if detailed else main_format,
                max_bytes, backup_count
            ))

    root_logger.info(
        f"Logging initialized - Level: {level}, "
        f"Console: {enable_console}, File: {enable_file}"
    )


def setup_preset(name: str, log_dir: str = "logs") -> None:
    """
    Apply one of PRESETS ("production", "development", "testing").

    Raises:
        ValueError: If the preset name is unknown
    """
    if name not in PRESETS:
        raise ValueError(f"Unknown logging preset '{name}', expected one of {sorted(PRESETS)}")
    setup_logging(log_dir=log_dir, **PRESETS[name])


def setup_production_logging(log_dir: str = "logs") -> None:
    """INFO to files only, simple format."""
    setup_preset("production", log_dir)


def setup_development_logging(log_dir: str = "logs") -> None:
    """DEBUG to colored console and files."""
    setup_preset("development", log_dir)


def setup_testing_logging() -> None:
    """WARNING to console, no files."""
    setup_preset("testing")


def get_logger(name: str) -> logging.Logger:
    """Logger for a module, typically get_logger(__name__)."""
    return logging.getLogger(name)


def configure_module_logger(
    module_name: str,
    level: Optional[str] = None,
    propagate: bool = True
) -> logging.Logger:
    """
    Set the level and propagation of one logger.

    Args:
        module_name: Dotted logger name, e.g. "standings.record_aggregator"
        level: Level name, or None to inherit from the parent
        propagate: Whether records reach the root handlers
    """
    logger = logging.getLogger(module_name)
    if level:
        logger.setLevel(_parse_level(level))
    logger.propagate = propagate
    return logger


def setup_standings_logging(level: str = "INFO") -> None:
    """Set every engine package logger to one level."""
    for package in ENGINE_PACKAGES:
        configure_module_logger(package, level=level)


def setup_tiebreaker_logging(level: str = "DEBUG") -> None:
    """Trace the tiebreaker cascade without raising the rest of the engine."""
    configure_module_logger(TIEBREAKER_LOGGER, level=level)


def log_exception(
    logger: logging.Logger,
    exception: Exception,
    context: Optional[dict] = None,
    level: str = "ERROR"
) -> None:
    """
    Log an exception with its traceback and context.

    A playoff exception's own context_dict is included ahead of any
    context passed here.

    Example:
        >>> try:
        ...     bracket = builder.build(seeds, results, picks)
        ... except PlayoffException as e:
        ...     log_exception(logger, e, context={"week": 19})
    """
    merged = dict(getattr(exception, "context_dict", None) or {})
    merged.update(context or {})

    context_str = ""
    if merged:
        context_str = " [" + ", ".join(f"{key}={value}" for key, value in merged.items()) + "]"

    logger.log(
        _parse_level(level),
        f"Exception occurred{context_str}: {type(exception).__name__}: {getattr(exception, 'message', exception)}",
        exc_info=exception
    )


class LogContext:
    """
    Temporarily change a logger's level.

    Example:
        >>> with LogContext(get_logger(TIEBREAKER_LOGGER), "DEBUG"):
        ...     resolver.order(tied_team_ids, TieType.WILDCARD)
    """

    def __init__(self, logger: logging.Logger, level: str):
        self.logger = logger
        self.new_level = _parse_level(level)
        self.original_level = logger.level

    def __enter__(self):
        self.logger.setLevel(self.new_level)
        return self.logger

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.logger.setLevel(self.original_level)
