# -*- coding: utf-8 -*-

import datetime as dt
import logging
import uuid
from typing import Callable, Optional

from domain.models import (
    ProjectState,
    TimeKind,
    TimeSegment,
    WorkRecord,
    utc_now,
)
from storage.repos import WorkRecordRepo
from storage.shards import StoreError

log = logging.getLogger(__name__)

Clock = Callable[[], dt.datetime]


class ActiveProject:
    """
    State machine over one WorkRecord (no UI, no loop).
    Working <-> Paused via begin_pause/resume_work, both -> Done via stop.
    Every transition is written through to the store.
    """

    def __init__(self, record: WorkRecord, repo: WorkRecordRepo, clock: Clock = utc_now):
        self.record = record
        self.repo = repo
        self.clock = clock

    @classmethod
    def new(cls, name: str, repo: WorkRecordRepo, clock: Clock = utc_now) -> "ActiveProject":
        start = clock()
        record = WorkRecord(
            id=str(uuid.uuid4()),
            name=name,
            start=start,
            end=None,
            state=ProjectState.WORKING,
            segments=[TimeSegment(start=start, end=None, kind=TimeKind.PRODUCTIVE)],
        )
        project = cls(record, repo, clock)
        log.info("%s", record)
        project._persist()
        return project

    @property
    def name(self) -> str:
        return self.record.name

    @property
    def state(self) -> ProjectState:
        return self.record.state

    def begin_pause(self) -> None:
        if self.record.state != ProjectState.WORKING:
            return
        self._switch_segment(TimeKind.PAUSE)
        self.record.state = ProjectState.PAUSED
        self._persist()

    def resume_work(self) -> None:
        if self.record.state != ProjectState.PAUSED:
            return
        self._switch_segment(TimeKind.PRODUCTIVE)
        self.record.state = ProjectState.WORKING
        self._persist()

    def stop(self) -> None:
        if self.record.state == ProjectState.DONE:
            return
        now = self.clock()
        last = self.record.segments[-1]
        last.finish(now)
        self.record.end = last.end
        self.record.state = ProjectState.DONE
        log.info("%s", self.record)
        self._persist()

    def calculate_duration(self) -> dt.timedelta:
        return self.record.calculate_duration(self.clock())

    def __str__(self) -> str:
        return str(self.record)

    # ----- internals -----
    def _switch_segment(self, kind: TimeKind) -> None:
        now = self.clock()
        self.record.segments[-1].finish(now)
        self.record.segments.append(TimeSegment(start=now, end=None, kind=kind))

    def _persist(self) -> None:
        try:
            self.repo.persist(self.record)
        except StoreError as e:
            log.error("failed to save work record for %s: %s", self.record.name, e)


def load_previous(repo: WorkRecordRepo, clock: Clock = utc_now) -> Optional[ActiveProject]:
    record = repo.get_latest()
    if record is None:
        return None
    return ActiveProject(record, repo, clock)
