"""cclip - copy standard input to the clipboard.

Reads all of standard input, converts it from its codepage to Unicode,
optionally rewrites and marks it up, and places it on the clipboard as
Unicode text or as an "HTML Format" fragment.
"""

import logging
import os
from logging.handlers import RotatingFileHandler
from pathlib import Path

__version__ = "0.1.0"

_HANDLER_NAME = "cclip"


def setup_logging(level: str = "WARNING", log_dir: Path | None = None) -> None:
    """Configure logging to stderr and, optionally, a rotating file.

    Standard output may carry the payload (``--stdout``), so the console
    handler writes to stderr.
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)

    # Repeated calls (tests, embedding) replace our handlers instead of stacking
    for handler in list(root_logger.handlers):
        if handler.get_name() == _HANDLER_NAME:
            root_logger.removeHandler(handler)
            handler.close()

    console_handler = logging.StreamHandler()
    console_handler.set_name(_HANDLER_NAME)
    console_handler.setLevel(level)
    console_formatter = logging.Formatter("%(levelname)s: %(message)s")
    console_handler.setFormatter(console_formatter)
    root_logger.addHandler(console_handler)

    if log_dir is None:
        return

    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / f"cclip.{os.getpid()}.log"

    # File handler - detailed logging with rotation (10MB, keep 5 backups)
    file_handler = RotatingFileHandler(
        log_file,
        maxBytes=10 * 1024 * 1024,
        backupCount=5,
        encoding="utf-8",
    )
    file_handler.set_name(_HANDLER_NAME)
    file_handler.setLevel(logging.DEBUG)
    file_formatter = logging.Formatter(
        "%(asctime)s | %(levelname)-8s | %(name)s:%(lineno)d | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    file_handler.setFormatter(file_formatter)
    root_logger.addHandler(file_handler)

    logging.debug("Logging configured. Log file: %s", log_file.absolute())
