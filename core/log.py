# -*- coding: utf-8 -*-

import logging
import os
import threading
from collections import deque
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Deque, List, Optional

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


class LogBuffer(logging.Handler):
    """
    Keeps the most recent formatted messages in memory for a status view.
    """

    def __init__(self, capacity: int = 500, level: int = logging.INFO):
        super().__init__(level)
        self._entries: Deque[str] = deque(maxlen=capacity)
        self._entries_lock = threading.Lock()

    def emit(self, record: logging.LogRecord) -> None:
        try:
            msg = self.format(record)
        except Exception:
            self.handleError(record)
            return
        with self._entries_lock:
            self._entries.append(msg)

    def last_n(self, n: int) -> List[str]:
        with self._entries_lock:
            if n <= 0:
                return []
            return list(self._entries)[-n:]


def setup_logging(
    log_file: Optional[str] = "track-work.log",
    level: int = logging.INFO,
    max_bytes: int = 10_000_000,
    backup_count: int = 5,
) -> LogBuffer:
    """
    Install the rotating file handler and the in-memory buffer on the root logger.
    Calling it again reuses the buffer and swaps the file handler only when the
    log file changes.
    """
    logger = logging.getLogger()
    logger.setLevel(level)

    target = os.path.abspath(log_file) if log_file else None
    for h in list(logger.handlers):
        if isinstance(h, RotatingFileHandler) and h.baseFilename != target:
            logger.removeHandler(h)
            h.close()

    if target and not any(
        isinstance(h, RotatingFileHandler) and h.baseFilename == target for h in logger.handlers
    ):
        Path(target).parent.mkdir(exist_ok=True, parents=True)
        handler = RotatingFileHandler(
            target, maxBytes=max_bytes, backupCount=backup_count, encoding="utf-8"
        )
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)

    for h in logger.handlers:
        if isinstance(h, LogBuffer):
            h.setLevel(level)
            return h

    buffer = LogBuffer(level=level)
    buffer.setFormatter(logging.Formatter("%(asctime)s %(message)s", "%H:%M:%S"))
    logger.addHandler(buffer)
    return buffer
