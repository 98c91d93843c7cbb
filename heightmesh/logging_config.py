"""
Logging for command line mesh generation.

Console output goes to stderr through tqdm so log lines do not break the
octave progress bar, and stdout is left to the generation summary. An
optional log file gets the detailed, timestamped format.
"""
import logging
import sys
from typing import Optional

from tqdm import tqdm

PACKAGE_LOGGER = "heightmesh"

CONSOLE_FORMAT = '%(levelname)s %(name)s: %(message)s'
FILE_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


class TqdmConsoleHandler(logging.StreamHandler):
    """Stream handler that writes through tqdm.write."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            tqdm.write(self.format(record), file=self.stream)
            self.flush()
        except (KeyboardInterrupt, SystemExit):
            raise
        except Exception:
            self.handleError(record)


def setup_logging(level: int = logging.INFO, log_file: Optional[str] = None) -> logging.Logger:
    """
    Configure the package logger.

    Calling it again replaces (and closes) the handlers of the previous call,
    so one process can run the CLI several times.

    Args:
        level: Logging level (e.g. logging.DEBUG, logging.INFO)
        log_file: Optional path that receives a copy of every record

    Returns:
        The configured package logger
    """
    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(level)

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    console_handler = TqdmConsoleHandler(sys.stderr)
    console_handler.setLevel(level)
    console_handler.setFormatter(logging.Formatter(CONSOLE_FORMAT))
    logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file, mode='w', encoding='utf-8')
        file_handler.setLevel(level)
        file_handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt='%Y-%m-%d %H:%M:%S'))
        logger.addHandler(file_handler)

    logger.debug("Logging at %s%s", logging.getLevelName(level),
                 f", copying to {log_file}" if log_file else "")
    return logger
