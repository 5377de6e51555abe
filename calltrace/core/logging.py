# Centralized logging configuration for the calltrace package.

import logging
import sys
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any, Dict, Optional

from calltrace.settings import Settings

if TYPE_CHECKING:
    from calltrace.core.invocation import InvocationRecord

# Recommended format
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Default level if LOG_LEVEL env var is not set
DEFAULT_LOG_LEVEL = "INFO"

# Valid log levels
VALID_LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]

# Libraries known to be noisy that we might want to quiet down
NOISY_LIBRARIES = ["httpx", "httpcore"]


def setup_logging():
    """
    Configures logging for the application.

    Reads the desired log level from the LOG_LEVEL environment variable.
    Defaults to INFO if not set or invalid.
    Sets a standard format and directs logs to stderr.
    Sets louder libraries to WARNING level.
    """
    settings = Settings()
    log_level_name = settings.get_log_level(default=DEFAULT_LOG_LEVEL)

    if log_level_name not in VALID_LOG_LEVELS:
        print(
            f"WARNING: Invalid LOG_LEVEL '{log_level_name}'. "
            f"Defaulting to {DEFAULT_LOG_LEVEL}. "
            f"Valid levels are: {', '.join(VALID_LOG_LEVELS)}",
            file=sys.stderr,
        )
        log_level_name = DEFAULT_LOG_LEVEL

    log_level = logging.getLevelName(log_level_name)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root_logger.addHandler(console_handler)

    for lib_name in NOISY_LIBRARIES:
        logging.getLogger(lib_name).setLevel(logging.WARNING)

    logging.getLogger(__name__).info(f"Logging configured with level {log_level_name}.")


def resolve_log_level(level_name: str, default: int = logging.INFO) -> int:
    """Map a level name such as "debug" to its numeric value, falling back to default."""
    level_name = level_name.upper()
    if level_name not in VALID_LOG_LEVELS:
        return default
    return getattr(logging, level_name)


def log_invocation_state(record: "InvocationRecord", stage: str, details: Optional[Dict[str, Any]] = None) -> None:
    """Log the state of an invocation at a stage of dispatch."""
    logger = logging.getLogger("calltrace.client.dispatch")
    logger.debug(
        f"[{record.operation.qualified_name}] Invocation {stage}",
        extra={
            "stage": stage,
            "operation": record.operation.qualified_name,
            "argument_count": len(record.arguments),
            "timestamp": datetime.now(UTC).isoformat(),
            **(details or {}),
        },
    )
