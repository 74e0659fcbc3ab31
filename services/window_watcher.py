# -*- coding: utf-8 -*-

import logging
import queue
import subprocess
import sys
import threading
import time
from typing import Callable, Optional

from core.change_monitor import ChangeMonitor

log = logging.getLogger(__name__)


def _foreground_title_windows() -> Optional[str]:
    import win32gui

    hwnd = win32gui.GetForegroundWindow()
    if not hwnd:
        return None
    return win32gui.GetWindowText(hwnd) or None


def _foreground_title_x11() -> Optional[str]:
    try:
        out = subprocess.run(
            ["xdotool", "getactivewindow", "getwindowname"],
            capture_output=True,
            text=True,
            timeout=2,
            check=True,
        )
    except (OSError, subprocess.SubprocessError) as e:
        log.debug("xdotool failed: %s", e)
        return None
    return out.stdout.strip() or None


def foreground_window_title() -> Optional[str]:
    if sys.platform.startswith("win"):
        return _foreground_title_windows()
    if sys.platform.startswith("linux"):
        return _foreground_title_x11()
    return None


class WindowWatcher:
    """
    Background sampler:
    - polls the foreground window title every `polling_interval` seconds
    - runs it through a ChangeMonitor (debounce)
    - hands stable titles to the main loop through a one-slot queue

    The put blocks while the previous title is still unread.
    The thread is a daemon and lives as long as the process.
    """

    def __init__(
        self,
        polling_interval: float,
        threshold: float,
        get_title: Callable[[], Optional[str]] = foreground_window_title,
    ):
        self.polling_interval = float(polling_interval)
        self.get_title = get_title
        self.monitor: ChangeMonitor[str] = ChangeMonitor("", threshold)
        self.titles: "queue.Queue[str]" = queue.Queue(maxsize=1)
        self._thread: Optional[threading.Thread] = None

    def start(self) -> "WindowWatcher":
        if self._thread is None:
            self._thread = threading.Thread(
                target=self._run, name="window-watcher", daemon=True
            )
            self._thread.start()
        return self

    def step(self) -> None:
        title = self.get_title()
        if title:
            self.monitor.set(title)
        stable = self.monitor.poll()
        if stable is not None:
            self.titles.put(stable)

    def _run(self) -> None:
        while True:
            time.sleep(self.polling_interval)
            try:
                self.step()
            except Exception:
                log.exception("failed during window handling")

    def poll(self) -> Optional[str]:
        """Non-blocking; called once per main-loop cycle."""
        try:
            return self.titles.get_nowait()
        except queue.Empty:
            return None
