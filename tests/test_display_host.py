"""Tests for DisplayHost against a fake display surface."""
import pytest

from rotation.display_host import ADVANCE_KEY
from rotation.sync_channel import HostCommand, SyncEvent

pytestmark = pytest.mark.qt

URLS = ["https://a.example", "https://b.example", "https://c.example"]


@pytest.fixture
def events(channel):
    """Every event the host emits, as (name, payload)."""
    captured = []
    for name in (SyncEvent.RESET_TIMER, SyncEvent.KEYUP,
                 SyncEvent.CHANGE_INDEX, SyncEvent.WINDOW_DESTROYED):
        channel.listen(name, lambda e: captured.append((e.name, e.payload)))
    return captured


def test_host_registers_commands(host, channel):
    assert channel.has_command(HostCommand.CREATE_WINDOW)
    assert channel.has_command(HostCommand.CHANGE_URL)
    assert channel.has_command(HostCommand.SET_PAGE_CHANGE_TIMESTAMP)


def test_create_window_opens_first_page(host, surface_factory, qtbot):
    with qtbot.waitSignal(host.surface_created, timeout=500):
        host.create_window(URLS)

    assert len(surface_factory.created) == 1
    assert surface_factory.last.visited == [URLS[0]]
    assert host.has_surface()
    assert host.page_index == 0
    assert host.urls == URLS
    assert host.timers_active()


def test_create_window_twice_reloads(host, surface_factory):
    host.create_window(URLS)
    host.create_window(URLS[:2])

    assert len(surface_factory.created) == 1
    assert surface_factory.last.reloads == 1
    assert host.urls == URLS[:2]


def test_create_window_with_empty_list(host, surface_factory):
    host.create_window([])
    assert not host.has_surface()
    assert surface_factory.created == []


def test_commands_arrive_through_channel(host, channel, surface_factory, clock):
    channel.invoke(HostCommand.CREATE_WINDOW, urls=URLS)
    channel.invoke(HostCommand.CHANGE_URL, index=2, end_time=clock.now + 1000)

    assert surface_factory.last.visited[-1] == URLS[2]
    assert host.page_index == 2
    assert host.get_page_change_timestamp() == clock.now + 1000


def test_change_url_does_not_echo_change_index(host, surface_factory, events, clock):
    host.create_window(URLS)

    host.change_url(1, clock.now + 5000)

    surface = surface_factory.last
    assert surface.visited[-1] == URLS[1]
    assert surface.titles[-1] == URLS[1]
    assert host.page_index == 1
    assert host.get_page_change_timestamp() == clock.now + 5000
    assert events == []


def test_change_url_out_of_bounds(host, surface_factory, events):
    host.create_window(URLS)

    host.change_url(len(URLS), 1)
    host.change_url(-1, 1)

    assert surface_factory.last.visited == [URLS[0]]
    assert host.page_index == 0
    assert events == []


def test_change_url_without_surface(host, events):
    host.change_url(0, 1)
    assert events == []


def test_set_page_change_timestamp(host, channel):
    channel.invoke(HostCommand.SET_PAGE_CHANGE_TIMESTAMP, timestamp=4242)
    assert host.get_page_change_timestamp() == 4242


def test_surface_interaction_events(host, events):
    host.reset_timer()
    host.keyup("ArrowLeft")
    assert events == [(SyncEvent.RESET_TIMER, None), (SyncEvent.KEYUP, "ArrowLeft")]


def test_request_page_reports_change_index(host, surface_factory, events):
    host.create_window(URLS)
    host.request_page(2)

    assert surface_factory.last.visited[-1] == URLS[2]
    assert events == [(SyncEvent.CHANGE_INDEX, 2)]


def test_request_page_out_of_bounds_is_silent(host, surface_factory, events):
    host.create_window(URLS)
    host.request_page(len(URLS))

    assert surface_factory.last.visited == [URLS[0]]
    assert events == []


class TestProgress:
    def test_progress_climbs_then_requests_next_page_once(self, host, events, clock):
        host.create_window(URLS)
        host.change_url(0, clock.now + 1000)
        events.clear()

        clock.advance(500)
        assert host.update_progress() == 50
        assert events == []

        clock.advance(500)
        assert host.update_progress() == 100
        assert events == [(SyncEvent.KEYUP, ADVANCE_KEY)]

        clock.advance(500)
        host.update_progress()
        assert events == [(SyncEvent.KEYUP, ADVANCE_KEY)]

    def test_progress_restarts_when_deadline_moves(self, host, events, clock):
        host.create_window(URLS)
        host.change_url(0, clock.now + 1000)

        clock.advance(800)
        assert host.update_progress() == 80

        host.set_page_change_timestamp(clock.now + 1000)
        assert host.update_progress() == 0

        clock.advance(500)
        assert host.update_progress() == 50
        assert (SyncEvent.KEYUP, ADVANCE_KEY) not in events

    def test_progress_without_deadline_never_advances(self, host, events, clock):
        host.create_window(URLS)
        host.request_page(1)
        events.clear()

        clock.advance(60_000)
        assert host.update_progress() == 0
        assert events == []

    def test_progress_without_surface(self, host):
        assert host.update_progress() == 0

    def test_progress_signal(self, host, clock, qtbot):
        host.create_window(URLS)
        host.change_url(0, clock.now + 1000)
        clock.advance(250)
        with qtbot.waitSignal(host.progress_changed, timeout=500) as blocker:
            host.update_progress()
        assert blocker.args == [25]


class TestLiveness:
    def test_responsive_surface(self, host, surface_factory, events):
        host.create_window(URLS)

        host.probe_liveness(schedule_evaluation=False)
        assert surface_factory.last.pings == 1
        assert host.evaluate_liveness() is True
        assert events == []

    def test_unresponsive_surface_is_skipped(self, host, surface_factory, events):
        surface_factory.responsive = False
        host.create_window(URLS)

        host.probe_liveness(schedule_evaluation=False)
        assert host.evaluate_liveness() is False
        assert events == [(SyncEvent.KEYUP, ADVANCE_KEY)]

    def test_evaluate_without_probe(self, host):
        host.create_window(URLS)
        assert host.evaluate_liveness() is None

    def test_probe_without_surface(self, host):
        host.probe_liveness(schedule_evaluation=False)
        assert host.evaluate_liveness() is None

    def test_overlapping_probes_collapse(self, host, surface_factory):
        surface_factory.responsive = False
        host.create_window(URLS)

        host.probe_liveness(schedule_evaluation=False)
        host.probe_liveness(schedule_evaluation=False)
        assert surface_factory.last.pings == 1

    def test_scheduled_evaluation(self, channel, clock, surface_factory, settings_manager, qtbot):
        from rotation.display_host import DisplayHost

        settings_manager.set('host.liveness_timeout_ms', 10)
        surface_factory.responsive = False
        host = DisplayHost(channel, surface_factory, clock=clock, settings_manager=settings_manager)
        keys = []
        channel.listen(SyncEvent.KEYUP, lambda e: keys.append(e.payload))
        try:
            host.create_window(URLS)
            host.probe_liveness()
            qtbot.waitUntil(lambda: keys == [ADVANCE_KEY], timeout=1000)
        finally:
            host.shutdown()


class TestTeardown:
    def test_surface_closed_reports_window_destroyed(self, host, events, qtbot):
        host.create_window(URLS)

        with qtbot.waitSignal(host.surface_destroyed, timeout=500):
            host.surface_closed()

        assert not host.has_surface()
        assert not host.timers_active()
        assert events == [(SyncEvent.WINDOW_DESTROYED, None)]

        host.surface_closed()
        assert events == [(SyncEvent.WINDOW_DESTROYED, None)]

    def test_closing_surface_goes_through_host(self, host, surface_factory, events):
        host.create_window(URLS)
        surface_factory.last.close()
        assert events == [(SyncEvent.WINDOW_DESTROYED, None)]

    def test_create_after_close_makes_new_surface(self, host, surface_factory):
        host.create_window(URLS)
        host.surface_closed()
        host.create_window(URLS)
        assert len(surface_factory.created) == 2

    def test_shutdown_is_quiet(self, host, channel, surface_factory, events):
        host.create_window(URLS)
        surface = surface_factory.last

        host.shutdown()

        assert surface.closed
        assert not channel.has_command(HostCommand.CHANGE_URL)
        assert not host.timers_active()
        assert events == []
