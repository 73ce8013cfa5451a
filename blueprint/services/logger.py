import inspect
import logging
import sys
from loguru import logger
from blueprint.config import settings

# These log full request URLs at INFO
QUIET_LOGGERS = ("httpx", "httpcore")


class InterceptHandler(logging.Handler):
    """Forwards stdlib logging records (adapters, uvicorn) into loguru."""

    def emit(self, record: logging.LogRecord):
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        # Find the caller that issued the logging call
        frame, depth = inspect.currentframe(), 0
        while frame and (depth == 0 or frame.f_code.co_filename == logging.__file__):
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


def setup_logging():
    logger.remove()
    logger.add(
        sys.stderr,
        level=settings.LOG_LEVEL,
        format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>"
    )
    # Add file logging
    if settings.LOG_TO_FILE:
        settings.ensure_dirs()
        log_file = settings.DATA_DIR / "app.log"
        logger.add(log_file, rotation="10 MB", level="DEBUG")

    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

setup_logging()
