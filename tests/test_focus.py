import logging

from core.change_monitor import ChangeMonitor
from domain.config import AppConfig, BreakConfig, LoggingConfig, ProjectConfig
from domain.models import ProjectState, TimeKind
from services.focus_service import FocusService
from services.session_service import SessionService
from services.window_watcher import WindowWatcher


class Ticker:
    def __init__(self):
        self.t = 100.0

    def __call__(self):
        return self.t


class RecordingSessions(SessionService):
    def __init__(self, repo, clock):
        super().__init__(repo, clock)
        self.started = []

    def start_working_on(self, name):
        self.started.append(name)
        return super().start_working_on(name)


def test_change_monitor_reports_stable_value_once():
    ticker = Ticker()
    monitor = ChangeMonitor("", 3.0, clock=ticker)

    monitor.set("a")
    assert monitor.poll() is None
    ticker.t += 3.0
    assert monitor.poll() == "a"
    ticker.t += 10
    assert monitor.poll() is None

    # same value again does not restart anything
    monitor.set("a")
    assert monitor.poll() is None


def test_change_monitor_ignores_oscillation():
    ticker = Ticker()
    monitor = ChangeMonitor("", 3.0, clock=ticker)
    for value in ["a", "b", "a", "b", "a"]:
        monitor.set(value)
        ticker.t += 1.0
        assert monitor.poll() is None

    ticker.t += 2.0
    assert monitor.poll() == "a"


def test_change_monitor_back_to_last_reported_value_is_silent():
    ticker = Ticker()
    monitor = ChangeMonitor("", 1.0, clock=ticker)
    monitor.set("a")
    ticker.t += 1
    assert monitor.poll() == "a"

    monitor.set("b")
    ticker.t += 0.5
    monitor.set("a")
    ticker.t += 5
    assert monitor.poll() is None


def test_debounced_title_starts_project_exactly_once(repo, clock, config):
    ticker = Ticker()
    titles = iter(
        ["Windows PowerShell - foo", "Slack", "Windows PowerShell - foo", "Slack"]
        + ["Windows PowerShell - foo"] * 10
    )
    watcher = WindowWatcher(0.5, 3.0, get_title=lambda: next(titles))
    watcher.monitor = ChangeMonitor("", 3.0, clock=ticker)

    sessions = RecordingSessions(repo, clock)
    focus = FocusService(sessions, config)

    for _ in range(14):
        watcher.step()
        title = watcher.poll()
        if title is not None:
            focus.on_window_title_changed(title)
        ticker.t += 0.5

    assert sessions.started == ["Xorcery"]
    assert sessions.active.name == "Xorcery"


def test_watcher_skips_missing_titles():
    ticker = Ticker()
    titles = iter(["Editor", None, None])
    watcher = WindowWatcher(0.5, 1.0, get_title=lambda: next(titles))
    watcher.monitor = ChangeMonitor("", 1.0, clock=ticker)

    watcher.step()
    ticker.t += 1.0
    watcher.step()
    assert watcher.poll() == "Editor"
    watcher.step()
    assert watcher.poll() is None


def test_prefix_match_is_case_insensitive(repo, clock, config):
    sessions = SessionService(repo, clock)
    FocusService(sessions, config).on_window_title_changed("windows powershell - admin")
    assert sessions.active.name == "Xorcery"


def test_last_matching_project_wins(repo, clock):
    config = AppConfig(
        projects=[
            ProjectConfig(name="Browser", windows=["Mozilla Firefox"]),
            ProjectConfig(name="EKS", windows=["Mozilla Firefox - EKS"]),
            ProjectConfig(name="Other", windows=["Notepad"]),
        ]
    )
    focus = FocusService(SessionService(repo, clock), config)
    assert focus.classify("Mozilla Firefox - EKS console") == "EKS"
    assert focus.classify("Mozilla Firefox - news") == "Browser"
    assert focus.classify("Terminal") is None


def test_unmatched_title_changes_nothing(repo, clock, config):
    sessions = SessionService(repo, clock)
    focus = FocusService(sessions, config)
    focus.on_window_title_changed("Solitaire")
    assert sessions.active is None

    focus.on_window_title_changed("EKS dashboard")
    before = list(sessions.active.record.segments)
    focus.on_window_title_changed("Solitaire")
    assert sessions.active.state == ProjectState.WORKING
    assert sessions.active.record.segments == before


def test_break_pauses_and_auto_resumes(repo, clock, config):
    sessions = SessionService(repo, clock)
    focus = FocusService(sessions, config)

    focus.on_window_title_changed("Windows PowerShell - foo")
    clock.advance(minutes=10)
    focus.on_window_title_changed("YouTube - cats")
    assert sessions.active.state == ProjectState.PAUSED
    assert focus.auto_paused

    clock.advance(minutes=5)
    focus.on_window_title_changed("YouTube - more cats")
    assert len(sessions.active.record.segments) == 2

    clock.advance(minutes=5)
    focus.on_window_title_changed("Solitaire")
    assert sessions.active.state == ProjectState.WORKING
    assert not focus.auto_paused
    assert [s.kind for s in sessions.active.record.segments] == [
        TimeKind.PRODUCTIVE,
        TimeKind.PAUSE,
        TimeKind.PRODUCTIVE,
    ]


def test_break_without_auto_resume_stays_paused(repo, clock):
    config = AppConfig(
        projects=[ProjectConfig(name="Xorcery", windows=["Windows PowerShell"])],
        breaks=BreakConfig(windows=["YouTube"], auto_resume=False),
    )
    sessions = SessionService(repo, clock)
    focus = FocusService(sessions, config)

    focus.on_window_title_changed("Windows PowerShell")
    focus.on_window_title_changed("YouTube")
    focus.on_window_title_changed("Solitaire")
    assert sessions.active.state == ProjectState.PAUSED

    # coming back to the project resumes the same record
    record_id = sessions.active.record.id
    focus.on_window_title_changed("Windows PowerShell")
    assert sessions.active.state == ProjectState.WORKING
    assert sessions.active.record.id == record_id


def test_break_without_session_is_ignored(repo, clock, config):
    sessions = SessionService(repo, clock)
    focus = FocusService(sessions, config)
    focus.on_window_title_changed("YouTube")
    assert sessions.active is None
    assert not focus.auto_paused


def test_switching_project_after_break_closes_old_record(repo, clock, config):
    sessions = SessionService(repo, clock)
    focus = FocusService(sessions, config)
    focus.on_window_title_changed("Windows PowerShell")
    focus.on_window_title_changed("YouTube")
    old = sessions.active

    focus.on_window_title_changed("EKS cluster")
    assert old.state == ProjectState.DONE
    assert old.record.segments[-1].kind == TimeKind.PAUSE
    assert sessions.active.name == "EKS"


def test_window_change_logging(repo, clock, caplog):
    config = AppConfig(logging=LoggingConfig(window_change=True))
    focus = FocusService(SessionService(repo, clock), config)
    with caplog.at_level(logging.INFO):
        focus.on_window_title_changed("Solitaire")
    assert "window changed: Solitaire" in caplog.text
