# -*- coding: utf-8 -*-

from __future__ import annotations

import os
import tomllib
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

from domain.config import (
    AppConfig,
    BreakConfig,
    Client,
    ConfigError,
    LoggingConfig,
    ProjectClient,
    ProjectConfig,
    WatcherConfig,
)

ENV_PREFIX = "TRACK_WORK_"
_TRUE = ("1", "true", "yes", "on")
_FALSE = ("0", "false", "no", "off")


def _str_list(value: Any, where: str) -> List[str]:
    if value is None:
        return []
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise ConfigError(f"{where} has to be an array of strings")
    return list(value)


def _bool(value: Any, where: str) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        v = value.strip().lower()
        if v in _TRUE:
            return True
        if v in _FALSE:
            return False
    raise ConfigError(f"{where} has to be a boolean value")


def _float(value: Any, where: str) -> float:
    try:
        out = float(value)
    except (TypeError, ValueError):
        raise ConfigError(f"{where} has to be a number")
    if out <= 0:
        raise ConfigError(f"{where} has to be positive")
    return out


def _table(raw: Mapping[str, Any], key: str) -> Dict[str, Any]:
    value = raw.get(key) or {}
    if not isinstance(value, dict):
        raise ConfigError(f"{key} has to be a table")
    return value


def _project(item: Any, index: int) -> ProjectConfig:
    if not isinstance(item, dict):
        raise ConfigError(f"projects[{index}] has to be a table")
    name = item.get("name")
    if not isinstance(name, str) or not name.strip():
        raise ConfigError(f"could not find project.name for projects[{index}]")

    clients = []
    for j, c in enumerate(item.get("clients") or []):
        if not isinstance(c, dict) or not isinstance(c.get("name"), str):
            raise ConfigError(f"project {name}: clients[{j}] needs a name")
        ratio = c.get("ratio")
        if isinstance(ratio, bool) or not isinstance(ratio, (int, float)):
            raise ConfigError(f"project {name}: ratio of client {c['name']} has to be a number")
        clients.append(ProjectClient(name=c["name"], ratio=float(ratio)))

    return ProjectConfig(
        name=name,
        windows=_str_list(item.get("windows"), f"project {name}: windows"),
        clients=clients,
    )


def _client(item: Any, index: int) -> Client:
    if not isinstance(item, dict) or not isinstance(item.get("name"), str):
        raise ConfigError(f"clients[{index}] needs a name")
    data = item.get("data") or {}
    if not isinstance(data, dict):
        raise ConfigError(f"client {item['name']}: data has to be a table")
    return Client(name=item["name"], data={str(k): str(v) for k, v in data.items()})


def build_config(raw: Mapping[str, Any], env: Optional[Mapping[str, str]] = None) -> AppConfig:
    """
    Turn a parsed config mapping into a validated AppConfig.
    Environment variables prefixed TRACK_WORK_ override single values.
    """
    env = os.environ if env is None else env

    projects_raw = raw.get("projects")
    if not isinstance(projects_raw, list):
        raise ConfigError("you need to configure the `projects`")
    projects = [_project(p, i) for i, p in enumerate(projects_raw)]
    clients = [_client(c, i) for i, c in enumerate(raw.get("clients") or [])]

    breaks = _table(raw, "breaks")
    logging_ = _table(raw, "logging")
    watcher = _table(raw, "watcher")

    window_change = logging_.get("window_change", logging_.get("windowChanges", False))
    auto_resume = breaks.get("auto_resume", False)
    polling = watcher.get("polling_interval", WatcherConfig.polling_interval)
    threshold = watcher.get("threshold", WatcherConfig.threshold)

    window_change = env.get(ENV_PREFIX + "LOGGING_WINDOW_CHANGE", window_change)
    auto_resume = env.get(ENV_PREFIX + "BREAKS_AUTO_RESUME", auto_resume)
    polling = env.get(ENV_PREFIX + "WATCHER_POLLING_INTERVAL", polling)
    threshold = env.get(ENV_PREFIX + "WATCHER_THRESHOLD", threshold)

    cfg = AppConfig(
        projects=projects,
        clients=clients,
        breaks=BreakConfig(
            windows=_str_list(breaks.get("windows"), "breaks.windows"),
            auto_resume=_bool(auto_resume, "breaks.auto_resume"),
        ),
        logging=LoggingConfig(window_change=_bool(window_change, "logging.window_change")),
        watcher=WatcherConfig(
            polling_interval=_float(polling, "watcher.polling_interval"),
            threshold=_float(threshold, "watcher.threshold"),
        ),
    )
    validate_config(cfg)
    return cfg


def validate_config(cfg: AppConfig) -> None:
    names = set()
    for p in cfg.projects:
        if p.name in names:
            raise ConfigError(f"project {p.name} is configured twice")
        names.add(p.name)

        # projects without clients are tracked but cannot be billed
        if not p.clients:
            continue
        cfg.client_split(p.name)
        for pc in p.clients:
            client = cfg.client(pc.name)
            if client is None:
                raise ConfigError(f"client {pc.name} of project {p.name} not found in clients")
            if not client.psp:
                raise ConfigError(f"client {pc.name} of project {p.name} has no psp")


def load_config(path: str | Path, env: Optional[Mapping[str, str]] = None) -> AppConfig:
    path = Path(path)
    try:
        with open(path, "rb") as handle:
            raw = tomllib.load(handle)
    except OSError as e:
        raise ConfigError(f"could not read config {path}: {e}") from e
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"config {path} is malformed: {e}") from e
    return build_config(raw, env)


def data_dir(cli_value: Optional[str] = None, env: Optional[Mapping[str, str]] = None) -> Path:
    env = os.environ if env is None else env
    if cli_value:
        return Path(cli_value)
    if env.get(ENV_PREFIX + "DATA_DIR"):
        return Path(env[ENV_PREFIX + "DATA_DIR"])
    return Path.cwd()
