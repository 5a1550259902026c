import pytest

from audio_regions.domain.region import RegionSpan
from audio_regions.services.transport import Transport, TransportEvent, TransportState


class FakeDriver:
    def __init__(self):
        self.calls = []

    def connect(self, on_position, on_finished):
        self.calls.append(("connect",))

    def load(self, buffer):
        self.calls.append(("load",))

    def play(self, position):
        self.calls.append(("play", position))

    def pause(self):
        self.calls.append(("pause",))

    def seek(self, position):
        self.calls.append(("seek", position))

    def dispatch_events(self):
        return 0


@pytest.fixture
def driver():
    return FakeDriver()


@pytest.fixture
def transport(three_regions, driver):
    return Transport(three_regions, driver)


def test_goto_clamps_and_seeks(transport, driver):
    transport.goto(12.0)

    assert transport.position == 10.0
    assert transport.current_region.start == 7.0
    assert driver.calls[-1] == ("seek", 10.0)

    transport.goto(-1.0)
    assert transport.position == 0.0


def test_stale_reports_after_seek_are_dropped(transport):
    transport.goto(5.0)

    transport.on_position(1.0)
    assert transport.position == 5.0

    transport.on_position(5.1)
    assert transport.position == 5.1

    transport.on_position(1.0)
    assert transport.position == 1.0
    assert transport.current_region.start == 0.0


def test_play_region_stops_at_region_end(transport, driver):
    assert transport.play_region(RegionSpan(4.0, 7.0))
    assert transport.state is TransportState.PLAYING_REGION_ONLY
    assert ("play", 4.0) in driver.calls

    transport.on_position(4.05)
    transport.on_position(6.5)
    assert transport.is_playing

    transport.on_position(7.0)
    assert transport.state is TransportState.STOPPED
    assert driver.calls[-1] == ("pause",)


def test_looping_region_restarts(transport, three_regions, driver):
    three_regions.set_loop(True)
    transport.play_region(RegionSpan(4.0, 7.0))
    transport.on_position(4.05)

    transport.on_position(7.01)

    assert transport.position == 4.0
    assert transport.state is TransportState.PLAYING_REGION_ONLY
    assert driver.calls[-1] == ("seek", 4.0)


def test_transport_loop_restarts_current_region(transport):
    transport.set_loop(True)
    transport.goto(4.5)
    transport.play()
    transport.on_position(4.6)

    transport.on_position(7.0)

    assert transport.position == 4.0
    assert transport.state is TransportState.PLAYING


def test_finish_near_end_snaps_to_duration(transport):
    transport.goto(9.9)
    transport.play()
    transport.on_position(9.85)

    transport.on_finished()

    assert transport.position == 10.0
    assert transport.state is TransportState.STOPPED


def test_finish_far_from_end_keeps_position(transport):
    transport.goto(5.0)
    transport.play()

    transport.on_finished()

    assert transport.position == 5.0
    assert not transport.is_playing


def test_report_past_end_finishes(transport):
    transport.goto(9.9)
    transport.play()

    transport.on_position(10.05)

    assert transport.position == 10.0
    assert not transport.is_playing


def test_next_and_previous_region(transport):
    transport.goto(5.0)

    assert transport.next_region()
    assert transport.position == 7.0
    assert transport.state is TransportState.PLAYING

    assert not transport.next_region()
    assert transport.position == 10.0
    assert transport.state is TransportState.STOPPED

    transport.goto(1.0)
    assert not transport.previous_region()
    assert transport.position == 0.0


def test_region_only_mode_plays_current_region(three_regions, driver):
    transport = Transport(three_regions, driver, region_only=True)
    transport.goto(4.5)

    transport.play()

    assert transport.state is TransportState.PLAYING_REGION_ONLY
    assert driver.calls[-1] == ("play", 4.5)


def test_toggle_play(transport):
    assert transport.toggle_play() is True
    assert transport.toggle_play() is False


def test_listeners_receive_current_region(transport):
    events = []
    transport.subscribe(events.append)

    transport.goto(2.0)

    assert events[-1] == TransportEvent(TransportState.STOPPED, 2.0, RegionSpan(0.0, 4.0, ""))


def test_looped_last_region_replays_at_buffer_end(transport, three_regions):
    # Arrange
    three_regions.set_loop(True)
    transport.goto(7.5)
    transport.play_region(RegionSpan(7.0, 10.0))
    transport.on_position(7.6)

    # Act
    transport.on_position(10.0)

    # Assert
    assert transport.state is TransportState.PLAYING_REGION_ONLY
    assert transport.position == 7.0


def test_looped_region_resumes_driver_after_finish(transport, three_regions, driver):
    three_regions.set_loop(True)
    transport.play_region(RegionSpan(7.0, 10.0))
    driver.calls.clear()

    transport.on_finished()

    assert transport.state is TransportState.PLAYING_REGION_ONLY
    assert driver.calls == [("seek", 7.0), ("play", 7.0)]


def test_transport_loop_resumes_driver_after_finish(transport, driver):
    transport.set_loop(True)
    transport.goto(8.0)
    transport.play()
    driver.calls.clear()

    transport.on_finished()

    assert transport.state is TransportState.PLAYING
    assert transport.position == 7.0
    assert driver.calls == [("seek", 7.0), ("play", 7.0)]


def test_unlooped_last_region_stops_at_buffer_end(transport, driver):
    transport.goto(7.5)
    transport.play_region(RegionSpan(7.0, 10.0))
    transport.on_position(7.6)

    transport.on_position(10.0)

    assert transport.state is TransportState.STOPPED
    assert transport.position == 10.0
    assert driver.calls[-1] == ("pause",)
