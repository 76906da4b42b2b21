import logging
import sys

from coursehub.core.config import get_settings

settings = get_settings()

LOG_LEVEL = logging.DEBUG if settings.debug else getattr(logging, settings.log_level.upper(), logging.INFO)

# project root logger; modules use get_logger(__name__) for children
logger = logging.getLogger("coursehub")
logger.setLevel(LOG_LEVEL)

if not logger.handlers:
    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(LOG_LEVEL)
    handler.setFormatter(logging.Formatter(
        "%(asctime)s %(levelname)-5s [%(name)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    ))
    logger.addHandler(handler)


def get_logger(name: str) -> logging.Logger:
    """Child of the project logger, e.g. get_logger("coursehub.services.x")."""
    if name == "coursehub" or name.startswith("coursehub."):
        return logging.getLogger(name)
    return logger.getChild(name)
