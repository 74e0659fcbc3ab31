# -*- coding: utf-8 -*-

import logging
import queue
import sys
import threading
from dataclasses import dataclass
from typing import Callable, Optional, TextIO

from core.log import LogBuffer
from domain.config import AppConfig
from services.session_service import SessionService

log = logging.getLogger(__name__)

ALIASES = {
    "p": "pause",
    "r": "resume",
    "s": "stop",
}
ACTIONS = ("start", "pause", "resume", "stop", "status", "log", "help")

HELP = "commands: start <project> | pause (p) | resume (r) | stop (s) | status | log [n] | help"


@dataclass(frozen=True)
class Command:
    action: str
    arg: str = ""


def parse_command(line: str) -> Optional[Command]:
    """
    Returns None for blank lines.
    Raises ValueError for unknown commands.
    """
    parts = (line or "").strip().split(None, 1)
    if not parts:
        return None
    action = parts[0].lower()
    action = ALIASES.get(action, action)
    if action not in ACTIONS:
        raise ValueError(f"unknown command {parts[0]!r}. {HELP}")
    arg = parts[1].strip() if len(parts) > 1 else ""
    return Command(action=action, arg=arg)


class CommandReader:
    """
    Reads command lines from a stream on a daemon thread and hands them to
    the main loop through a one-slot queue, like WindowWatcher does for titles.
    """

    def __init__(self, stream: Optional[TextIO] = None):
        self.stream = stream if stream is not None else sys.stdin
        self.lines: "queue.Queue[str]" = queue.Queue(maxsize=1)
        self.closed = False
        self._thread: Optional[threading.Thread] = None

    def start(self) -> "CommandReader":
        if self._thread is None:
            self._thread = threading.Thread(
                target=self._run, name="command-reader", daemon=True
            )
            self._thread.start()
        return self

    def step(self) -> bool:
        """Read one line; False once the stream is exhausted."""
        line = self.stream.readline()
        if not line:
            self.closed = True
            return False
        if line.strip():
            self.lines.put(line)
        return True

    def _run(self) -> None:
        try:
            while self.step():
                pass
        except (OSError, ValueError) as e:
            log.warning("stopped reading commands: %s", e)

    def poll(self) -> Optional[str]:
        try:
            return self.lines.get_nowait()
        except queue.Empty:
            return None


class CommandService:
    """
    Manual session control: start a configured project, pause, resume, stop.
    """

    def __init__(
        self,
        sessions: SessionService,
        config: AppConfig,
        log_buffer: Optional[LogBuffer] = None,
        out: Callable[[str], None] = print,
    ):
        self.sessions = sessions
        self.config = config
        self.log_buffer = log_buffer
        self.out = out

    def _project_name(self, arg: str) -> str:
        if not arg:
            raise ValueError("start needs a project name")
        for p in self.config.projects:
            if p.name.lower() == arg.lower():
                return p.name
        known = ", ".join(p.name for p in self.config.projects) or "none"
        raise ValueError(f"unknown project {arg!r} (configured: {known})")

    def execute(self, command: Command) -> None:
        if command.action == "start":
            self.sessions.start_working_on(self._project_name(command.arg))
        elif command.action == "pause":
            self.sessions.begin_pause()
        elif command.action == "resume":
            self.sessions.resume_work()
        elif command.action == "stop":
            self.sessions.stop()
        elif command.action == "status":
            active = self.sessions.active
            self.out(str(active) if active else "idle")
        elif command.action == "log":
            self._show_log(command.arg)
        else:
            self.out(HELP)

    def handle_line(self, line: str) -> None:
        try:
            command = parse_command(line)
            if command is not None:
                self.execute(command)
        except ValueError as e:
            self.out(str(e))

    def _show_log(self, arg: str) -> None:
        if self.log_buffer is None:
            self.out("log buffer not enabled")
            return
        try:
            n = int(arg) if arg else 10
        except ValueError:
            raise ValueError(f"log takes a number of lines, got {arg!r}")
        for line in self.log_buffer.last_n(n):
            self.out(line)
