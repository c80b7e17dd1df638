import logging
import sys
from typing import Any

from loguru import logger

from app.core.config import settings

# Third-party loggers routed through loguru; boto and httpx chatter stays at WARNING.
ROUTED_LOGGERS = ("uvicorn", "uvicorn.error", "uvicorn.access")
QUIET_LOGGERS = ("httpx", "httpcore", "botocore", "boto3", "s3transfer", "PIL", "filelock")

CONSOLE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {extra[name]} | {message} | {extra}"


class InterceptHandler(logging.Handler):
    """Forward stdlib records (uvicorn, boto, httpx) to loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level: str | int = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        frame, depth = logging.currentframe(), 2
        while frame and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back  # type: ignore[assignment]
            depth += 1

        logger.bind(name=record.name).opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


def setup_logging() -> None:
    """Send every reel, job and server record to stderr through loguru."""
    logger.remove()
    logger.configure(extra={"name": "reels"})
    logger.add(
        sys.stderr,
        level="DEBUG" if settings.debug else "INFO",
        format=CONSOLE_FORMAT,
        colorize=settings.debug,
        backtrace=True,
        diagnose=settings.debug,
    )

    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)
    for name in ROUTED_LOGGERS:
        logging.getLogger(name).handlers = [InterceptHandler()]
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> Any:
    return logger.bind(name=name)
