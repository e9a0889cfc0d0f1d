"""Logging configuration for taskflow."""

import logging
import sys
from datetime import UTC, datetime
from pathlib import Path

# Remote writes run on executor threads, so the thread name is part of the record
LOG_FORMAT = "%(asctime)s - %(name)s - %(threadName)s - %(levelname)s - %(message)s"


def setup_logging(verbose: int = 0, log_file: Path | None = None) -> None:
    """Configure the taskflow logger namespace.

    Args:
        verbose: Verbosity level (0=off, 1=INFO, 2+=DEBUG)
        log_file: Optional path to write logs to file
    """
    if verbose == 0 and log_file is None:
        return

    level = logging.DEBUG if verbose >= 2 else logging.INFO

    logger = logging.getLogger("taskflow")
    logger.setLevel(level)

    # Calling twice (e.g. from tests) must not double every line
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")

    if verbose > 0:
        stderr_handler = logging.StreamHandler(sys.stderr)
        stderr_handler.setLevel(level)
        stderr_handler.setFormatter(formatter)
        logger.addHandler(stderr_handler)

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    # The Supabase client logs each request itself
    logging.getLogger("httpx").setLevel(logging.WARNING)

    timestamp = datetime.now(UTC).strftime("%Y-%m-%d %H:%M:%S UTC")
    logger.info("taskflow starting | %s | level=%s", timestamp, logging.getLevelName(level))
