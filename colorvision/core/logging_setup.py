"""Logging configuration for colorvision."""
import logging
import os
from ..utils.config import SETTINGS


def setup_logger() -> logging.Logger:
    """Setup and configure logging for the color vision pipeline."""
    lvl_name = (getattr(SETTINGS, "log_level", None) or os.environ.get("COLORVISION_LOGLEVEL", "INFO")).upper()
    level = getattr(logging, lvl_name, logging.INFO)

    # Configure ROOT logger so ALL child loggers (colorvision.cv.*, etc.) inherit the level
    root_logger = logging.getLogger()
    if not root_logger.handlers:
        handler = logging.StreamHandler()
        fmt = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
        handler.setFormatter(logging.Formatter(fmt=fmt, datefmt="%Y-%m-%d %H:%M:%S"))
        root_logger.addHandler(handler)
    root_logger.setLevel(level)

    package_logger = logging.getLogger("colorvision")
    package_logger.setLevel(level)
    return package_logger
