# expense_tracker/core/logging.py
import logging
from typing import Union

LOG_FORMAT = "%(asctime)s  %(name)-30s  %(levelname)-5s  %(message)s"


def configure_logging(level: Union[str, int] = "INFO") -> None:
    """Install a single stream handler on the root logger (idempotent)."""
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    root = logging.getLogger()
    root.setLevel(level)
    for handler in root.handlers:
        if getattr(handler, "_expense_tracker", False):
            handler.setLevel(level)
            return

    handler = logging.StreamHandler()
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handler._expense_tracker = True  # type: ignore[attr-defined]
    root.addHandler(handler)
