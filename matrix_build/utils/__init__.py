"""
Utility modules for the build system
"""

import sys
import logging
from .artifacts import ArtifactCollector, CopyOutcome, CopyStatus, HarvestReport, list_artifacts


class ColoredFormatter(logging.Formatter):
    """Colored log formatter for terminal output"""

    COLORS = {
        'DEBUG': '\033[36m',    # Cyan
        'INFO': '\033[34m',     # Blue
        'WARNING': '\033[33m',  # Yellow
        'ERROR': '\033[31m',    # Red
        'CRITICAL': '\033[35m', # Magenta
        'SUCCESS': '\033[32m',  # Green
        'RESET': '\033[0m'
    }

    def format(self, record):
        if getattr(record, 'raw', False):
            return record.getMessage()

        # Add color for terminal output
        if sys.stdout.isatty():
            color = self.COLORS.get(record.levelname, self.COLORS['RESET'])
            reset = self.COLORS['RESET']

            record = logging.makeLogRecord(record.__dict__)
            record.levelname = f"{color}{record.levelname}{reset}"

        return super().format(record)


class Logger:
    """Console logger for matrix runs with a SUCCESS level and raw summary lines"""

    SUCCESS = 25  # Between INFO and WARNING

    def __init__(self, verbose: bool = False, name: str = "matrix_build"):
        """
        Args:
            verbose: Log debug messages with timestamps
            name: Logger name
        """
        logging.addLevelName(self.SUCCESS, "SUCCESS")

        self.logger = logging.getLogger(name)
        self.logger.setLevel(logging.DEBUG if verbose else logging.INFO)
        self.logger.propagate = False

        self.logger.handlers.clear()

        fmt = "%(asctime)s [%(levelname)s] %(message)s" if verbose else "[%(levelname)s] %(message)s"
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(ColoredFormatter(fmt, datefmt="%H:%M:%S"))
        self.logger.addHandler(handler)

    def debug(self, msg: str):
        self.logger.debug(msg)

    def info(self, msg: str):
        self.logger.info(msg)

    def warning(self, msg: str):
        self.logger.warning(msg)

    def error(self, msg: str):
        self.logger.error(msg)

    def success(self, msg: str):
        """Completed step, logged at SUCCESS between INFO and WARNING"""
        self.logger.log(self.SUCCESS, msg)

    def raw(self, msg: str):
        """Summary line printed verbatim, bypassing level and color"""
        record = self.logger.makeRecord(
            self.logger.name, logging.INFO, "", 0, msg, (), None
        )
        record.raw = True
        self.logger.handle(record)


__all__ = [
    "Logger",
    "ColoredFormatter",
    "ArtifactCollector",
    "CopyOutcome",
    "CopyStatus",
    "HarvestReport",
    "list_artifacts",
]
