"""Logging configuration with Rich formatting.

setup_logging() installs a RichHandler once at startup. Every module logger
from get_logger() lives under the `research_pipeline` namespace, so the
package level can be tuned without touching third-party loggers.
"""

import logging
from typing import Optional
from rich.logging import RichHandler
from .config import get_settings

ROOT_LOGGER = "research_pipeline"

# Libraries that log every request or page at INFO
NOISY_LOGGERS = ("httpx", "httpcore", "trafilatura", "pypdf")

def setup_logging(level: Optional[str] = None):
    level = level or get_settings().LOG_LEVEL
    logging.basicConfig(
        level=logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=True, show_path=False)]
    )
    logging.getLogger(ROOT_LOGGER).setLevel(level)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

def get_logger(name: str) -> logging.Logger:
    if name == ROOT_LOGGER or name.startswith(ROOT_LOGGER + "."):
        return logging.getLogger(name)
    return logging.getLogger(f"{ROOT_LOGGER}.{name}")
