from __future__ import annotations

"""
Logging Lifecycle.

Idempotent root-logger setup. Worker threads only enqueue records through a
QueueHandler; a QueueListener thread does the console and file I/O, so slow
disks never stall analysis workers.
"""

import atexit
import logging
import queue
import sys
from logging.handlers import QueueHandler, QueueListener
from typing import List, Optional

from filescope.infra.logging.config import LEVEL_NAMES, LoggingConfig
from filescope.infra.logging.handlers import (
    create_console_handler,
    create_file_handler,
    is_owned,
    mark_owned,
)

_CONFIGURED_ATTR: str = "_filescope_configured"
_LISTENER_ATTR: str = "_filescope_listener"


# ==============================================================================
# PUBLIC API
# ==============================================================================

def parse_level(level: Optional[str]) -> int:
    """Numeric level for a severity name; unknown names map to INFO."""
    if not level:
        return logging.INFO
    return LEVEL_NAMES.get(str(level).strip().upper(), logging.INFO)


def configure_logging(cfg: LoggingConfig, *, force: bool = False) -> logging.Logger:
    """
    Configure the root logger once per process.

    Args:
        cfg: Logging settings.
        force: Replace a previous configuration made by this function.

    Returns:
        logging.Logger: The root logger.
    """
    root = logging.getLogger()
    if getattr(root, _CONFIGURED_ATTR, False) and not force:
        return root

    try:
        level = parse_level(cfg.level)
        root.setLevel(level)
        shutdown_logging()

        targets: List[logging.Handler] = []
        if cfg.console:
            targets.append(create_console_handler(level, cfg.console_fmt))
        if cfg.log_file:
            fh = create_file_handler(
                cfg.log_file, level, cfg.file_fmt, cfg.datefmt, cfg.max_bytes, cfg.backup_count
            )
            if fh is not None:
                targets.append(fh)

        if not targets:
            return root

        log_queue: "queue.Queue[logging.LogRecord]" = queue.Queue(-1)
        listener = QueueListener(log_queue, *targets, respect_handler_level=True)
        listener.start()

        root.addHandler(mark_owned(QueueHandler(log_queue)))
        setattr(root, _LISTENER_ATTR, listener)
        setattr(root, _CONFIGURED_ATTR, True)
        atexit.register(_stop_listener, listener)
        return root

    except Exception as e:
        # Emergency console so diagnostics are never lost entirely
        fallback = create_console_handler(logging.INFO, "FALLBACK | %(levelname)s | %(message)s")
        root.addHandler(fallback)
        root.warning(f"Logging setup failed ({e}); using emergency console.")
        return root


def shutdown_logging() -> None:
    """Flush and detach every handler installed by configure_logging()."""
    root = logging.getLogger()

    listener = getattr(root, _LISTENER_ATTR, None)
    if listener is not None:
        _stop_listener(listener)
        setattr(root, _LISTENER_ATTR, None)

    for handler in list(root.handlers):
        if is_owned(handler):
            root.removeHandler(handler)
            handler.close()

    setattr(root, _CONFIGURED_ATTR, False)


# ==============================================================================
# PRIVATE HELPERS
# ==============================================================================

def _stop_listener(listener: QueueListener) -> None:
    # QueueListener.stop() fails if the thread was already joined
    if getattr(listener, "_thread", None) is None:
        return
    try:
        listener.stop()
    except RuntimeError as e:
        sys.stderr.write(f"WARNING: Log listener shutdown failed: {e}\n")
