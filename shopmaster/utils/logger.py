import sys

from loguru import logger

from shopmaster.config import Settings

LOG_FORMAT = "{time} | {level} | {message}"


def setup_logging(settings: Settings):
    """Route application logs to stderr and, when LOG_DIR is set, to rotating files"""
    logger.remove()
    logger.add(sys.stderr, level=settings.log_level, format=LOG_FORMAT)
    if settings.log_dir:
        logger.add(
            f"{settings.log_dir}/shopmaster_{{time:YYYY-MM-DD_HH-mm-ss}}.log",
            mode="a",
            level=settings.log_level,
            format=LOG_FORMAT,
            rotation="5 MB",
            retention="7 days",
        )
    return logger
