import logging
import os
import sys
import uuid
from contextvars import ContextVar
from pathlib import Path
from typing import TYPE_CHECKING, Optional

from loguru import logger

from wallet_gateway.core.config import Environment, settings

if TYPE_CHECKING:
    from loguru import Record

# ============================================
# CONTEXT VARIABLES FOR REQUEST TRACKING
# ============================================
request_id_var: ContextVar[Optional[str]] = ContextVar("request_id", default=None)


# ============================================
# LOG DIRECTORY AND FILE PATHS
# ============================================
LOG_DIR = Path("logs")
LOG_DIR.mkdir(exist_ok=True)

# Single unified log file for all workers
LOG_FILE = LOG_DIR / "app.log"


LOG_LEVELS = {
    50: "CRITICAL",
    40: "ERROR",
    30: "WARNING",
    20: "INFO",
    10: "DEBUG",
    0: "NOTSET",
}


def correlation_filter(record: "Record") -> bool:
    """
    Add request ID and process ID to log records.

    Args:
        record (Record): Log record from Loguru.

    Returns:
        bool: Always True, no record is dropped.
    """
    record["extra"]["request_id"] = request_id_var.get() or str(uuid.uuid4())[:8]
    record["extra"]["process_id"] = os.getpid()

    return True


class InterceptHandler(logging.Handler):
    """
    Intercepts standard logging and redirects to Loguru.
    Used to replace Uvicorn's default loggers with our Loguru configuration.
    """

    def emit(self, record: logging.LogRecord):
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        # Find the caller from where the logging call originated
        frame = logging.currentframe()
        depth = 2
        while frame and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


def setup_logger():
    """
    Configure Loguru for the gateway.

    - Console sink, colored, DEBUG in dev environments
    - Single file sink shared by all workers (enqueue=True), 10MB rotation,
      3 months retention, gzip compression

    Call once during application startup (lifespan).
    """
    logger.remove()

    log_level = LOG_LEVELS[settings.log_level]

    console_format = (
        "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
        "<level>{level: <8}</level> | "
        "<magenta>PID:{extra[process_id]}</magenta> | "
        "<yellow>ReqID:{extra[request_id]}</yellow> | "
        "<cyan>{name}:{function}:{line}</cyan> | "
        "<level>{message}</level>"
    )

    logger.add(
        sys.stdout,
        format=console_format,
        level=(
            logging.DEBUG
            if settings.current_environment in {Environment.LOCAL, Environment.DEV}
            else logging.INFO
        ),
        colorize=True,
        enqueue=True,
        filter=correlation_filter,
    )

    file_format = (
        "{time:YYYY-MM-DD HH:mm:ss!UTC} | "
        "{level: <8} | "
        "PID:{extra[process_id]} | "
        "ReqID:{extra[request_id]} | "
        "{name}:{function}:{line} | "
        "{message}"
    )

    logger.add(
        LOG_FILE,
        format=file_format,
        level=log_level,
        rotation="10 MB",
        retention="3 months",
        compression="gz",
        enqueue=True,
        serialize=False,
        filter=correlation_filter,
        backtrace=True,
        # Variable values in tracebacks could expose session secrets
        diagnose=not settings.is_production,
    )

    logger.info(
        f"Logger initialized | "
        f"Environment: {settings.current_environment.value} | "
        f"Level: {log_level}"
    )


def configure_uvicorn_logging():
    """
    Replace Uvicorn's default logging with Loguru.

    Call this during app startup, after setup_logger().
    """
    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)

    for name in logging.root.manager.loggerDict.keys():
        if name.startswith("uvicorn"):
            logging.getLogger(name).handlers = [InterceptHandler()]
            logging.getLogger(name).propagate = False

    logger.debug("Uvicorn logging configured to use Loguru")


def shutdown_logger():
    """
    Flush all pending logs. Call this in the lifespan shutdown.
    """
    logger.info("Shutting down logger...")
    logger.complete()
