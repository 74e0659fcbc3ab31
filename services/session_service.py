# -*- coding: utf-8 -*-

import logging
from typing import Callable, Optional

from core.session_engine import ActiveProject, Clock, load_previous
from domain.models import ProjectState, utc_now
from storage.repos import WorkRecordRepo

log = logging.getLogger(__name__)


class SessionService:
    """
    Orchestrates:
    - the single ActiveProject
    - switching projects (stop old, start new)
    - callbacks for UI

    Use as a context manager so the active session is stopped on every exit path.
    """

    def __init__(self, repo: WorkRecordRepo, clock: Clock = utc_now):
        self.repo = repo
        self.clock = clock
        self.active: Optional[ActiveProject] = None

        self._on_state_change: Optional[Callable[[Optional[ActiveProject]], None]] = None

    def __enter__(self) -> "SessionService":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    # ----- Callbacks -----
    def set_on_state_change(self, fn: Callable[[Optional[ActiveProject]], None]) -> None:
        self._on_state_change = fn

    def _emit_state_change(self) -> None:
        if self._on_state_change:
            self._on_state_change(self.active)

    # ----- Public API -----
    def load_previous(self) -> Optional[ActiveProject]:
        self.active = load_previous(self.repo, self.clock)
        if self.active is not None:
            log.info("restored %s", self.active)
        self._emit_state_change()
        return self.active

    def is_active(self, name: Optional[str] = None) -> bool:
        if self.active is None or self.active.state == ProjectState.DONE:
            return False
        return name is None or self.active.name == name

    def start_working_on(self, name: str) -> ActiveProject:
        name = (name or "").strip()
        if not name:
            raise ValueError("Project name cannot be empty.")

        if self.is_active(name):
            # same project: undo a pause instead of opening a new record
            self.active.resume_work()
        else:
            if self.active is not None:
                self.active.stop()
            self.active = ActiveProject.new(name, self.repo, self.clock)

        self._emit_state_change()
        return self.active

    def begin_pause(self) -> None:
        if self.active is None:
            return
        self.active.begin_pause()
        self._emit_state_change()

    def resume_work(self) -> None:
        if self.active is None:
            return
        self.active.resume_work()
        self._emit_state_change()

    def stop(self) -> None:
        if self.active is None:
            return
        self.active.stop()
        self._emit_state_change()

    def close(self) -> None:
        self.stop()
