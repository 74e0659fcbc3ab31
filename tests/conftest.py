import datetime as dt

import pytest

from domain.config import AppConfig, BreakConfig, Client, ProjectClient, ProjectConfig
from storage.repos import WorkRecordRepo

MONDAY = dt.datetime(2024, 3, 4, 9, 0, tzinfo=dt.timezone.utc)


class FakeClock:
    def __init__(self, start=MONDAY):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, **kwargs):
        self.now = self.now + dt.timedelta(**kwargs)
        return self.now


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def repo(tmp_path):
    return WorkRecordRepo(tmp_path)


@pytest.fixture
def config():
    return AppConfig(
        projects=[
            ProjectConfig(
                name="Xorcery",
                windows=["Windows PowerShell"],
                clients=[ProjectClient("A", 1.0)],
            ),
            ProjectConfig(name="EKS", windows=["EKS", "Mozilla Firefox - EKS"]),
        ],
        clients=[Client("A", {"psp": "P-A"})],
        breaks=BreakConfig(windows=["YouTube"], auto_resume=True),
    )
