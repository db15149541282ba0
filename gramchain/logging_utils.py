"""Mini README: Logging setup shared by every GramChain module.

Structure:
    * get_logger - module logger; installs the shared handler on first use.
    * configure_root_logger - install the handler and apply a root level.

Usage:
    Modules declare ``LOGGER = get_logger(__name__)`` at import time, which
    only attaches the stream handler. Entry points call
    ``configure_root_logger(settings.log_level)`` afterwards to pick the level;
    calling it again changes the level without adding a second handler.
"""

from __future__ import annotations

import logging
from typing import Optional, Union

LOG_FORMAT = "[%(asctime)s] [%(levelname)s] %(name)s - %(message)s"
_handler: Optional[logging.Handler] = None


def _install_handler() -> logging.Logger:
    global _handler
    root_logger = logging.getLogger()
    if _handler is None:
        _handler = logging.StreamHandler()
        _handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
        root_logger.addHandler(_handler)
        root_logger.setLevel(logging.INFO)
    return root_logger


def configure_root_logger(level: Union[int, str, None] = None) -> None:
    """Attach the ledger handler and optionally set the root level by name or number."""

    root_logger = _install_handler()
    if level is not None:
        root_logger.setLevel(level.upper() if isinstance(level, str) else level)


def get_logger(name: Optional[str] = None) -> logging.Logger:
    _install_handler()
    return logging.getLogger(name)
