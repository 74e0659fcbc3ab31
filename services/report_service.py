# -*- coding: utf-8 -*-

import datetime as dt
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from domain.config import AppConfig, ConfigError
from domain.models import WorkRecord, utc_now
from storage.repos import WorkRecordRepo

log = logging.getLogger(__name__)


def _fmt_hours(minutes: float) -> str:
    return f"{minutes / 60.0:.2f}h"


@dataclass(frozen=True)
class ReportRow:
    label: str = ""
    minutes: Optional[float] = None

    @property
    def is_separator(self) -> bool:
        return self.minutes is None

    @property
    def hours(self) -> Optional[float]:
        return None if self.minutes is None else self.minutes / 60.0

    @property
    def value(self) -> str:
        return "" if self.minutes is None else _fmt_hours(self.minutes)


@dataclass
class Report:
    week: dt.date
    rows: List[ReportRow] = field(default_factory=list)

    def row(self, label: str) -> Optional[ReportRow]:
        for r in self.rows:
            if r.label == label:
                return r
        return None

    def as_text(self) -> str:
        width = max([len("psp")] + [len(r.label) for r in self.rows])
        lines = [f"{'psp':<{width}}  hours"]
        for r in self.rows:
            lines.append(f"{r.label:<{width}}  {r.value}".rstrip())
        return "\n".join(lines)


class ReportService:
    def __init__(self, repo: WorkRecordRepo, config: AppConfig):
        self.repo = repo
        self.config = config

    def _billing_codes(self) -> Dict[str, float]:
        # declaration order of clients decides row order
        totals: Dict[str, float] = {}
        for c in self.config.clients:
            if c.psp and c.psp not in totals:
                totals[c.psp] = 0.0
        return totals

    def aggregate(self, records: List[WorkRecord], now: Optional[dt.datetime] = None) -> Dict[str, float]:
        """
        Billable minutes per billing code.
        Raises ConfigError on the first record whose project cannot be billed.
        """
        now = now or utc_now()
        totals = self._billing_codes()

        for record in records:
            split = self.config.client_split(record.name)
            minutes = int(record.calculate_duration(now).total_seconds() // 60)
            for pc in split:
                client = self.config.client(pc.name)
                if client is None:
                    raise ConfigError(f"client {pc.name} not found in clients")
                if not client.psp:
                    raise ConfigError(f"client {pc.name} of project {record.name} has no psp")
                totals[client.psp] += pc.ratio * minutes

        return totals

    def generate_report(self, week_start: dt.date, now: Optional[dt.datetime] = None) -> Report:
        records = self.repo.find_week(week_start)
        totals = self.aggregate(records, now)

        rows = [ReportRow(label=psp, minutes=m) for psp, m in totals.items()]
        rows.append(ReportRow())
        rows.append(ReportRow(label="Total", minutes=sum(totals.values())))

        log.info("report for week of %s: %d records", week_start, len(records))
        return Report(week=week_start, rows=rows)
