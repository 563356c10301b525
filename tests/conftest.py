"""
Shared pytest fixtures for rotator tests.
"""
import os
import sys
from collections import deque

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

import pytest
from PySide6.QtWidgets import QApplication

from rotation.sync_channel import HostCommand, SyncChannel


START_MS = 1_700_000_000_000


class ManualClock:
    """Clock that only moves when told to."""

    def __init__(self, start_ms: int = START_MS):
        self.now = start_ms

    def now_ms(self) -> int:
        return self.now

    def advance(self, ms: int) -> int:
        self.now += ms
        return self.now


class CommandRecorder:
    """Stands in for the display host by recording every command."""

    def __init__(self, channel: SyncChannel):
        self.calls = []
        for name in (HostCommand.CREATE_WINDOW, HostCommand.CHANGE_URL,
                     HostCommand.SET_PAGE_CHANGE_TIMESTAMP):
            channel.register_command(name, self._recorder(name))

    def _recorder(self, name):
        def _record(**kwargs):
            self.calls.append((name, kwargs))
        return _record

    def names(self):
        return [name for name, _ in self.calls]

    def of(self, name):
        return [kwargs for call_name, kwargs in self.calls if call_name == name]

    def clear(self):
        self.calls.clear()


class FakeSurface:
    """DisplaySurface test double."""

    def __init__(self, url, host, responsive=True):
        self.host = host
        self.responsive = responsive
        self.visited = [url]
        self.titles = []
        self.reloads = 0
        self.pings = 0
        self.closed = False

    def navigate(self, url):
        self.visited.append(url)

    def set_title(self, title):
        self.titles.append(title)

    def reload(self):
        self.reloads += 1

    def ping(self):
        self.pings += 1
        if self.responsive:
            self.host.window_alive()

    def close(self):
        self.closed = True
        self.host.surface_closed()


class PostedQueue:
    """FIFO stand-in for zero-delay deliveries posted to the event loop."""

    def __init__(self):
        self.pending = deque()

    def post(self, delay_ms, func, *args, **kwargs):
        self.pending.append((func, args, kwargs))

    def drain(self, limit=1000):
        """Run queued deliveries, including ones they post. Returns the count."""
        runs = 0
        while self.pending and runs < limit:
            func, args, kwargs = self.pending.popleft()
            func(*args, **kwargs)
            runs += 1
        return runs


class SurfaceFactory:
    """Factory that keeps hold of every surface it creates."""

    def __init__(self, responsive=True):
        self.responsive = responsive
        self.created = []

    def __call__(self, url, host):
        surface = FakeSurface(url, host, responsive=self.responsive)
        self.created.append(surface)
        return surface

    @property
    def last(self):
        return self.created[-1] if self.created else None


@pytest.fixture(scope='session')
def qt_app():
    """Create QApplication instance for tests."""
    app = QApplication.instance()
    if app is None:
        app = QApplication(sys.argv)
    yield app
    # Don't quit - causes issues with pytest


@pytest.fixture
def settings_manager(qt_app):
    """Create SettingsManager instance for testing."""
    from core.settings import SettingsManager
    manager = SettingsManager(organization="Test", application="RotatorTest")
    yield manager
    # Clear test settings
    manager.clear()


@pytest.fixture
def clock():
    return ManualClock()


@pytest.fixture
def channel():
    """Immediate-mode channel so deliveries happen inline."""
    ch = SyncChannel()
    yield ch
    ch.close()


@pytest.fixture
def recorder(channel):
    return CommandRecorder(channel)


@pytest.fixture
def session_storage(qt_app, tmp_path):
    from rotation.session_storage import SessionStorage
    storage = SessionStorage(tmp_path / "session.ini")
    yield storage
    storage.clear()


@pytest.fixture
def controller(qt_app, channel, clock, session_storage):
    from rotation.controller import RotationController
    ctrl = RotationController(channel, clock=clock, session_storage=session_storage)
    yield ctrl
    ctrl.shutdown()


@pytest.fixture
def surface_factory():
    return SurfaceFactory()


@pytest.fixture
def host(qt_app, channel, clock, surface_factory):
    from rotation.display_host import DisplayHost
    display_host = DisplayHost(channel, surface_factory, clock=clock)
    yield display_host
    display_host.shutdown()


@pytest.fixture
def posted(monkeypatch):
    """Deferred channel deliveries queue here until ``drain()``."""
    queue = PostedQueue()
    monkeypatch.setattr("rotation.sync_channel.single_shot", queue.post)
    return queue


@pytest.fixture
def deferred_channel(posted):
    ch = SyncChannel(deferred=True)
    yield ch
    ch.close()
