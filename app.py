#!/usr/bin/env python3
# -*- coding: utf-8 -*-

import argparse
import datetime as dt
import logging
import signal
import sys
import time
from typing import List, Optional

from core.app_config import data_dir, load_config
from core.log import LogBuffer, setup_logging
from domain.config import AppConfig, ConfigError
from services.command_service import HELP, CommandReader, CommandService
from services.focus_service import FocusService
from services.report_service import ReportService
from services.session_service import SessionService
from services.window_watcher import WindowWatcher
from storage.repos import WorkRecordRepo

log = logging.getLogger(__name__)


def _parse_args(argv: Optional[List[str]]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="track-work", description="Track work time per project.")
    parser.add_argument("--config", default="config.toml", help="path to the TOML config")
    parser.add_argument("--data-dir", default=None, help="where work_records/ lives")
    parser.add_argument("--log-file", default="track-work.log")

    sub = parser.add_subparsers(dest="command")
    track = sub.add_parser("track", help="follow window focus (default)")
    track.add_argument("--tick-rate", type=int, default=250, help="ms between two main-loop cycles")

    report = sub.add_parser("report", help="print billable hours of one week")
    report.add_argument("--week", type=dt.date.fromisoformat, default=None, help="any day of the week (YYYY-MM-DD)")

    args = parser.parse_args(argv)
    if args.command is None:
        args.command = "track"
        args.tick_rate = 250
    return args


def run_loop(
    sessions: SessionService,
    focus: FocusService,
    watcher: WindowWatcher,
    tick_rate: float,
    reader: Optional[CommandReader] = None,
    commands: Optional[CommandService] = None,
) -> None:
    last_seen = None
    while True:
        title = watcher.poll()
        if title is not None:
            focus.on_window_title_changed(title)

        if reader is not None and commands is not None:
            line = reader.poll()
            if line is not None:
                commands.handle_line(line)

        active = sessions.active
        seen = (active.record.id, active.state) if active else None
        if seen != last_seen:
            last_seen = seen
            print(str(active) if active else "idle", flush=True)

        time.sleep(tick_rate)


def _raise_interrupt(signum, frame) -> None:
    # one interrupt is enough; a repeated signal must not cut the final stop() short
    for s in _shutdown_signals():
        signal.signal(s, signal.SIG_IGN)
    raise KeyboardInterrupt(f"signal {signum}")


def _shutdown_signals() -> List[int]:
    # SIGTERM: kill / service stop, SIGHUP: logout, SIGBREAK: console close on Windows
    names = ("SIGTERM", "SIGHUP", "SIGBREAK")
    return [getattr(signal, n) for n in names if hasattr(signal, n)]


def track(cfg: AppConfig, repo: WorkRecordRepo, tick_rate_ms: int, log_buffer: Optional[LogBuffer] = None) -> int:
    watcher = WindowWatcher(cfg.watcher.polling_interval, cfg.watcher.threshold)
    reader = CommandReader()

    previous = {s: signal.signal(s, _raise_interrupt) for s in _shutdown_signals()}
    try:
        with SessionService(repo) as sessions:
            sessions.load_previous()
            focus = FocusService(sessions, cfg)
            commands = CommandService(sessions, cfg, log_buffer)
            watcher.start()
            reader.start()
            print(HELP, flush=True)
            try:
                run_loop(sessions, focus, watcher, tick_rate_ms / 1000.0, reader, commands)
            except KeyboardInterrupt:
                log.info("shutting down")
    finally:
        for s, handler in previous.items():
            signal.signal(s, handler)
    return 0


def report(cfg: AppConfig, repo: WorkRecordRepo, week: Optional[dt.date]) -> int:
    week = week or dt.date.today()
    try:
        result = ReportService(repo, cfg).generate_report(week)
    except ConfigError as e:
        log.error("report for week of %s failed: %s", week, e)
        print(f"no report produced: {e}", file=sys.stderr)
        return 1
    print(result.as_text())
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = _parse_args(argv)
    log_buffer = setup_logging(args.log_file)

    try:
        cfg = load_config(args.config)
    except ConfigError as e:
        print(f"config malformed: {e}", file=sys.stderr)
        return 2

    repo = WorkRecordRepo(data_dir(args.data_dir))

    if args.command == "report":
        return report(cfg, repo, args.week)
    return track(cfg, repo, args.tick_rate, log_buffer)


if __name__ == "__main__":
    sys.exit(main())
