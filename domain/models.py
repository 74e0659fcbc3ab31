# -*- coding: utf-8 -*-

import datetime as dt
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


def utc_now() -> dt.datetime:
    return dt.datetime.now(dt.timezone.utc)


def format_ts(ts: dt.datetime) -> str:
    return ts.astimezone(dt.timezone.utc).isoformat().replace("+00:00", "Z")


def parse_ts(value: str) -> dt.datetime:
    if not isinstance(value, str):
        raise ValueError(f"timestamp has to be a string, got {value!r}")
    ts = dt.datetime.fromisoformat(value.replace("Z", "+00:00"))
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=dt.timezone.utc)
    return ts


class TimeKind(str, Enum):
    PRODUCTIVE = "Productive"
    PAUSE = "Pause"


class ProjectState(str, Enum):
    WORKING = "Working"
    PAUSED = "Paused"
    DONE = "Done"


_STATE_ICONS = {
    ProjectState.WORKING: "♪",
    ProjectState.PAUSED: "𝄽",
    ProjectState.DONE: "✓",
}


@dataclass
class TimeSegment:
    start: dt.datetime
    end: Optional[dt.datetime]
    kind: TimeKind

    def finish(self, now: dt.datetime) -> None:
        if self.end is None:
            self.end = now

    def duration(self, now: dt.datetime) -> dt.timedelta:
        return (self.end or now) - self.start

    def to_dict(self) -> Dict[str, Any]:
        return {
            "start": format_ts(self.start),
            "end": format_ts(self.end) if self.end else None,
            "kind": self.kind.value,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TimeSegment":
        if not isinstance(data, dict):
            raise ValueError(f"segment has to be an object, got {data!r}")
        end = data.get("end")
        return cls(
            start=parse_ts(data["start"]),
            end=parse_ts(end) if end else None,
            kind=TimeKind(data["kind"]),
        )


@dataclass
class WorkRecord:
    id: str
    name: str
    start: dt.datetime
    end: Optional[dt.datetime]
    state: ProjectState
    segments: List[TimeSegment] = field(default_factory=list)

    def open_segment(self) -> Optional[TimeSegment]:
        if self.segments and self.segments[-1].end is None:
            return self.segments[-1]
        return None

    def calculate_duration(self, now: Optional[dt.datetime] = None) -> dt.timedelta:
        """
        Productive time only; an open segment counts up to `now`.
        """
        now = now or utc_now()
        total = dt.timedelta(0)
        for seg in self.segments:
            if seg.kind == TimeKind.PRODUCTIVE:
                total += seg.duration(now)
        return total

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "start": format_ts(self.start),
            "end": format_ts(self.end) if self.end else None,
            "state": self.state.value,
            "segments": [s.to_dict() for s in self.segments],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "WorkRecord":
        if not isinstance(data, dict):
            raise ValueError(f"work record has to be an object, got {data!r}")
        raw_segments = data.get("segments") or []
        if not isinstance(raw_segments, list):
            raise ValueError(f"segments of work record {data.get('id')!r} have to be a list")
        end = data.get("end")
        segments = [TimeSegment.from_dict(s) for s in raw_segments]
        if not segments:
            raise ValueError(f"work record {data.get('id')!r} has no segments")
        return cls(
            id=str(data["id"]),
            name=str(data["name"]),
            start=parse_ts(data["start"]),
            end=parse_ts(end) if end else None,
            state=ProjectState(data["state"]),
            segments=segments,
        )

    def __str__(self) -> str:
        icon = _STATE_ICONS[self.state]
        start = self.start.astimezone().strftime("%Y-%m-%d %H:%M")
        end = f" - {self.end.astimezone().strftime('%H:%M')}" if self.end else ""

        sec = int(self.calculate_duration().total_seconds())
        h = sec // 3600
        m = (sec % 3600) // 60
        s = sec % 60
        return f"{icon} {self.name}: {start}{end} (time spent: {h:02d}:{m:02d}:{s:02d})"
