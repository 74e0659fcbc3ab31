# -*- coding: utf-8 -*-

import logging
from typing import List, Optional

from domain.config import AppConfig
from domain.models import ProjectState
from services.session_service import SessionService

log = logging.getLogger(__name__)


def _matches(title: str, prefixes: List[str]) -> bool:
    t = title.lower()
    return any(t.startswith(p.lower()) for p in prefixes)


class FocusService:
    """
    Maps stable foreground-window titles to projects and breaks and drives
    the SessionService accordingly. Unmatched titles change nothing.
    """

    def __init__(self, sessions: SessionService, config: AppConfig):
        self.sessions = sessions
        self.config = config
        self.auto_paused = False

    def classify(self, title: str) -> Optional[str]:
        # later declarations override earlier ones
        matched = None
        for project in self.config.projects:
            if _matches(title, project.windows):
                matched = project.name
        return matched

    def is_break(self, title: str) -> bool:
        return _matches(title, self.config.breaks.windows)

    def on_window_title_changed(self, title: str) -> None:
        if self.config.logging.window_change:
            log.info("window changed: %s", title)

        project = self.classify(title)
        on_break = project is None and self.is_break(title)

        if self.auto_paused and not on_break:
            self.auto_paused = False
            # a matched project resumes or replaces the session below
            if self.config.breaks.auto_resume and project is None:
                self.sessions.resume_work()

        if project is not None:
            self.sessions.start_working_on(project)
            return

        if on_break:
            active = self.sessions.active
            if active is not None and active.state == ProjectState.WORKING:
                self.sessions.begin_pause()
                self.auto_paused = True
