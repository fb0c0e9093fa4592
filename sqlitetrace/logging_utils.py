"""sqlitetrace.logging_utils

Logging setup for the demo program:
- Console logging on stderr so it doesn't interleave with the trace lines on stdout
- Optional rotating file log for longer runs
"""

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path


LOG_FORMAT = "%(asctime)s %(levelname)s %(message)s"


def build_logger(level: int | str = logging.INFO, log_dir: str | None = None, name: str = "sqlitetrace") -> logging.Logger:
    logger = logging.getLogger(name)
    logger.setLevel(level)

    # Repeated runs in one process (tests) must not stack handlers
    if logger.handlers:
        return logger

    fmt = logging.Formatter(LOG_FORMAT)
    if log_dir:
        Path(log_dir).mkdir(parents=True, exist_ok=True)
        handler = RotatingFileHandler(
            str(Path(log_dir) / "sqlitetrace.log"), maxBytes=2_000_000, backupCount=5, encoding="utf-8"
        )
        handler.setFormatter(fmt)
        logger.addHandler(handler)

    console = logging.StreamHandler()
    console.setFormatter(fmt)
    logger.addHandler(console)
    return logger
