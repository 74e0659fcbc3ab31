# -*- coding: utf-8 -*-

import math
from dataclasses import dataclass, field
from typing import Dict, List, Optional

RATIO_TOLERANCE = 1e-9


class ConfigError(ValueError):
    pass


@dataclass(frozen=True)
class ProjectClient:
    name: str
    ratio: float


@dataclass(frozen=True)
class ProjectConfig:
    name: str
    windows: List[str] = field(default_factory=list)
    clients: List[ProjectClient] = field(default_factory=list)


@dataclass(frozen=True)
class Client:
    name: str
    data: Dict[str, str] = field(default_factory=dict)

    @property
    def psp(self) -> Optional[str]:
        return self.data.get("psp")


@dataclass(frozen=True)
class BreakConfig:
    windows: List[str] = field(default_factory=list)
    auto_resume: bool = False


@dataclass(frozen=True)
class LoggingConfig:
    window_change: bool = False


@dataclass(frozen=True)
class WatcherConfig:
    # seconds
    polling_interval: float = 0.5
    threshold: float = 3.0


@dataclass(frozen=True)
class AppConfig:
    projects: List[ProjectConfig] = field(default_factory=list)
    clients: List[Client] = field(default_factory=list)
    breaks: BreakConfig = field(default_factory=BreakConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    watcher: WatcherConfig = field(default_factory=WatcherConfig)

    def project(self, name: str) -> Optional[ProjectConfig]:
        for p in self.projects:
            if p.name == name:
                return p
        return None

    def client(self, name: str) -> Optional[Client]:
        for c in self.clients:
            if c.name == name:
                return c
        return None

    def client_split(self, project_name: str) -> List[ProjectClient]:
        """
        Clients of a project, checked for billing:
        - list present and non-empty
        - ratios sum to 1
        Raises ConfigError naming the project otherwise.
        """
        project = self.project(project_name)
        if project is None or not project.clients:
            raise ConfigError(
                f"no clients found for project {project_name}, please revise configuration"
            )
        total = sum(pc.ratio for pc in project.clients)
        if not math.isclose(total, 1.0, rel_tol=0.0, abs_tol=RATIO_TOLERANCE):
            raise ConfigError(
                f"the ratios of the clients for project {project_name} don't sum up to 1 (got {total})"
            )
        return list(project.clients)
