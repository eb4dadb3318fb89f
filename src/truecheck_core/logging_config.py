"""
Logging setup

Text logs for development, JSON lines for production.
"""

import logging
import sys

from pythonjsonlogger import jsonlogger

from truecheck_core.detector_config import MonitoringConfig

_TEXT_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
_JSON_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


def configure_logging(monitoring: MonitoringConfig | None = None) -> logging.Logger:
    """
    Install a single stderr handler on the root logger

    Args:
        monitoring: MonitoringConfig (log_format json/text, log_level)

    Returns:
        The configured root logger
    """
    monitoring = monitoring or MonitoringConfig()

    logger = logging.getLogger()
    logger.handlers.clear()
    logger.setLevel(monitoring.log_level.upper())

    handler = logging.StreamHandler(sys.stderr)
    if monitoring.log_format.lower() == "json":
        formatter = jsonlogger.JsonFormatter(_JSON_FORMAT)
    else:
        formatter = logging.Formatter(_TEXT_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")

    handler.setFormatter(formatter)
    logger.addHandler(handler)
    return logger
