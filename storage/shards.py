#!/usr/bin/env python3
# -*- coding: utf-8 -*-

import datetime as dt
import json
import logging
import os
import re
import time
from pathlib import Path
from typing import Dict, List, Optional, Union

from domain.models import WorkRecord

log = logging.getLogger(__name__)

SHARD_SUFFIX = ".json"
SHARD_KEY = re.compile(r"\d{4}-\d{2}")


class StoreError(OSError):
    pass


class ShardDecodeError(StoreError):
    pass


def week_key(when: Union[dt.datetime, dt.date]) -> str:
    """
    ISO week of a timestamp or date as "YYYY-WW" (e.g. 2023-05).
    Zero padding keeps lexicographic order equal to chronological order.
    """
    if isinstance(when, dt.datetime):
        if when.tzinfo is not None:
            when = when.astimezone(dt.timezone.utc)
        when = when.date()
    year, week, _ = when.isocalendar()
    return f"{year:04d}-{week:02d}"


class ShardDir:
    """
    One JSON file per ISO week: <root>/<YYYY-WW>.json
    mapping record id -> record dict.
    """

    def __init__(self, root: Union[str, Path]):
        self.root = Path(root)

    def ensure(self) -> None:
        try:
            self.root.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StoreError(f"could not create database directory ({self.root}): {e}") from e

    def path_of(self, key: str) -> Path:
        return self.root / f"{key}{SHARD_SUFFIX}"

    def keys(self) -> List[str]:
        try:
            names = [p.name for p in self.root.iterdir() if p.is_file()]
        except OSError as e:
            raise StoreError(f"failed to list files in database directory ({self.root}): {e}") from e
        stems = (n[: -len(SHARD_SUFFIX)] for n in names if n.endswith(SHARD_SUFFIX))
        # only YYYY-WW files are shards; anything else in the folder is ignored
        return sorted(s for s in stems if SHARD_KEY.fullmatch(s))

    def latest_key(self) -> Optional[str]:
        keys = self.keys()
        return keys[-1] if keys else None

    def load(self, key: str) -> Dict[str, WorkRecord]:
        path = self.path_of(key)
        if not path.is_file():
            return {}

        try:
            with open(path, encoding="utf-8") as handle:
                payload = json.load(handle)
        except OSError as e:
            raise StoreError(f"failed to read {path}: {e}") from e
        except ValueError as e:
            raise ShardDecodeError(f"malformed shard {path}: {e}") from e

        if not isinstance(payload, dict):
            raise ShardDecodeError(f"malformed shard {path}: expected an object")

        try:
            return {str(rid): WorkRecord.from_dict(item) for rid, item in payload.items()}
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            raise ShardDecodeError(f"malformed record in {path}: {e}") from e

    def save(self, key: str, records: Dict[str, WorkRecord]) -> None:
        path = self.path_of(key)
        tmp = path.with_name(path.name + ".tmp")
        payload = {rid: r.to_dict() for rid, r in records.items()}
        try:
            with open(tmp, "w", encoding="utf-8") as handle:
                json.dump(payload, handle, ensure_ascii=False)
            os.replace(tmp, path)
        except OSError as e:
            raise StoreError(f"failed to write {path}: {e}") from e

    def quarantine(self, key: str) -> Path:
        # keep the unreadable file around so it can be recovered by hand
        path = self.path_of(key)
        moved = path.with_name(f"{path.name}.corrupt-{int(time.time())}")
        try:
            os.replace(path, moved)
        except OSError as e:
            raise StoreError(f"could not move aside corrupt shard {path}: {e}") from e
        return moved
