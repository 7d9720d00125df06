# app/core/logging.py
import logging
import os
import sys
from typing import Any

from loguru import logger

from app.core.config import settings


class InterceptHandler(logging.Handler):
    """
    Route records from the standard logging module into loguru.
    """
    def emit(self, record: logging.LogRecord) -> None:
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        frame, depth = logging.currentframe(), 2
        # climb out of logging/__init__.py
        while frame and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(
            depth=depth,
            exception=record.exc_info,
        ).log(level, record.getMessage())


def setup_logging(
    *,
    json_logs: bool = settings.JSON_LOGS,
    log_file: bool = settings.LOG_TO_FILE,
    log_dir: str = settings.LOG_DIR,
) -> None:
    """
    Global logging configuration:
    - Intercepts standard logging (uvicorn, sqlalchemy, fastapi)
    - Console: every level from INFO up
    - Files (optional):
        - app_YYYY-MM-DD.log   -> INFO and WARNING
        - error_YYYY-MM-DD.log -> ERROR and above
    """
    logging.root.handlers = []
    logging.root.setLevel(logging.INFO)

    for name in ("uvicorn", "uvicorn.error", "uvicorn.access", "fastapi", "sqlalchemy"):
        logging.getLogger(name).handlers = [InterceptHandler()]
        logging.getLogger(name).propagate = False

    logger.remove()

    if json_logs:
        fmt = (
            '{{"time":"{time}","level":"{level}","message":{message!r},'
            '"name":"{name}","function":"{function}","line":{line},'
            '"extra":"{extra}"}}'
        )
    else:
        fmt = (
            "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
            "<level>{level: <8}</level> | "
            "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
            "<level>{message}</level> | {extra}"
        )

    logger.add(
        sys.stdout,
        format=fmt,
        level="INFO",
        backtrace=True,
        diagnose=False,
    )

    if log_file:
        os.makedirs(log_dir, exist_ok=True)

        app_log_path = os.path.join(log_dir, "app_{time:YYYY-MM-DD}.log")
        error_log_path = os.path.join(log_dir, "error_{time:YYYY-MM-DD}.log")

        logger.add(
            app_log_path,
            format=fmt,
            level="INFO",
            filter=lambda record: record["level"].no < 40,  # < ERROR (40)
            rotation="00:00",
            retention="7 days",
            compression="zip",
            enqueue=True,
        )

        # approval failures and integrity violations are kept longer
        logger.add(
            error_log_path,
            format=fmt,
            level="ERROR",
            rotation="00:00",
            retention="30 days",
            compression="zip",
            enqueue=True,
        )


def get_logger(**binds: Any):
    """Loguru logger with `binds` attached to every record as extra fields."""
    return logger.bind(**binds)
