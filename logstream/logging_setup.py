"""Console logging setup with per-subsystem debug filtering."""

import datetime
import logging
import time
from typing import Optional, Set

from .module_registry import module_registry

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


class MillisecondFormatter(logging.Formatter):
    """Formatter that includes milliseconds in timestamps."""

    def formatTime(self, record, datefmt=None):
        """Override formatTime to include milliseconds."""
        if datefmt:
            return time.strftime(datefmt, self.converter(record.created))
        dt = datetime.datetime.fromtimestamp(record.created)
        return dt.strftime("%H:%M:%S.%f")[:-3]


class DebugLogFilter(logging.Filter):
    """Filter controlling debug message visibility by logger name."""

    def __init__(self, logger_names: Optional[Set[str]] = None):
        """Initialize filter with allowed logger names.

        Args:
            logger_names: Logger names to show debug messages for.
                          If None, show all debug messages.
                          If empty, show no debug messages.
        """
        super().__init__()
        self.logger_names = logger_names

    def filter(self, record):
        """Filter log records based on logger name and level."""
        if record.levelno != logging.DEBUG:
            return True

        if self.logger_names is None:
            return True

        if not self.logger_names:
            return False

        return any(record.name == name or record.name.startswith(name + ".") for name in self.logger_names)


def setup_logging(level: str = "INFO", debug_subsystems: Optional[Set[str]] = None) -> logging.Handler:
    """
    Install a console handler on the root logger.

    Args:
        level: Root log level name.
        debug_subsystems: Subsystem names (see ``module_registry``) whose DEBUG
            records are shown. When given, the root level is lowered to DEBUG.

    Returns:
        The installed handler.
    """
    handler = logging.StreamHandler()
    handler.setFormatter(MillisecondFormatter(LOG_FORMAT))

    root_logger = logging.getLogger()
    if debug_subsystems:
        handler.addFilter(DebugLogFilter(module_registry.get_debug_logger_names(debug_subsystems)))
        root_logger.setLevel(logging.DEBUG)
    else:
        root_logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    root_logger.addHandler(handler)
    return handler
