# storage/repos.py
#!/usr/bin/env python3
# -*- coding: utf-8 -*-

import datetime as dt
import logging
import threading
from pathlib import Path
from typing import List, Optional, Union

from domain.models import WorkRecord
from storage.shards import ShardDecodeError, ShardDir, StoreError, week_key

log = logging.getLogger(__name__)

WeekRef = Union[dt.datetime, dt.date]


class WorkRecordRepo:
    """
    Weekly-sharded work record store.
    - one shard per ISO week of record.start
    - every write rewrites the whole shard
    - all access goes through one lock
    """

    def __init__(self, data_dir: Union[str, Path]):
        self.shards = ShardDir(Path(data_dir) / "work_records")
        self._lock = threading.Lock()
        try:
            self.shards.ensure()
        except StoreError as e:
            # persist() retries; until then records only live in memory
            log.error("%s", e)

    def persist(self, record: WorkRecord) -> None:
        key = week_key(record.start)
        with self._lock:
            self.shards.ensure()
            try:
                entries = self.shards.load(key)
            except ShardDecodeError as e:
                moved = self.shards.quarantine(key)
                log.warning("%s; moved it to %s and starting week %s afresh", e, moved, key)
                entries = {}

            entries[record.id] = record
            self.shards.save(key, entries)

    def get_latest(self) -> Optional[WorkRecord]:
        with self._lock:
            try:
                key = self.shards.latest_key()
                if key is None:
                    return None
                entries = self.shards.load(key)
            except StoreError as e:
                log.warning("failed to load latest week: %s", e)
                return None

        if not entries:
            return None
        return max(entries.values(), key=lambda r: r.start)

    def find_week(self, week: WeekRef) -> List[WorkRecord]:
        key = week_key(week)
        with self._lock:
            try:
                entries = self.shards.load(key)
            except StoreError as e:
                log.warning("failed to load week %s: %s", key, e)
                return []
        return list(entries.values())

    def get_by_id(self, record_id: str, week: WeekRef) -> Optional[WorkRecord]:
        key = week_key(week)
        with self._lock:
            try:
                entries = self.shards.load(key)
            except StoreError as e:
                log.warning("failed to load week %s: %s", key, e)
                return None
        return entries.get(record_id)
