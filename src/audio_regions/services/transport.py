import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional, Protocol

from audio_regions.config.settings import settings
from audio_regions.domain.region import Region, RegionId, RegionSpan
from audio_regions.domain.region_store import RegionStore

logger = logging.getLogger(__name__)


class TransportState(str, Enum):
    STOPPED = "stopped"
    PLAYING = "playing"
    PLAYING_REGION_ONLY = "playing_region_only"


class PlaybackDriver(Protocol):
    """What the transport needs from an audio output."""

    def connect(self, on_position: Callable[[float], None], on_finished: Callable[[], None]) -> None: ...

    def load(self, buffer) -> None: ...

    def play(self, position: float) -> None: ...

    def pause(self) -> None: ...

    def seek(self, position: float) -> None: ...

    def dispatch_events(self) -> int: ...


@dataclass(frozen=True)
class TransportEvent:
    state: TransportState
    position: float
    current_region: Optional[RegionSpan]


TransportListener = Callable[[TransportEvent], None]


class Transport:
    """
    Playback position, play/pause and region-bounded playback.
    Driver callbacks are expected on the thread that owns the transport.

    Position reports from the driver are treated as idempotent "set position"
    events. After a seek, reports that are not near the seek target are stale
    and dropped.
    """

    def __init__(self, store: RegionStore, driver: Optional[PlaybackDriver] = None, region_only: bool = False):
        self.store = store
        self.driver = driver
        self.region_only = region_only
        self.state = TransportState.STOPPED
        self.position = 0.0
        self.looping = False
        self._current: Optional[RegionId] = None
        self._play_region: Optional[RegionId] = None
        self._seek_target: Optional[float] = None
        self._listeners: List[TransportListener] = []

    # --- observers ---

    def subscribe(self, listener: TransportListener) -> None:
        self._listeners.append(listener)

    def _notify(self) -> None:
        current = self.current_region
        event = TransportEvent(self.state, self.position, current.to_span() if current else None)
        for listener in list(self._listeners):
            listener(event)

    # --- queries ---

    @property
    def duration(self) -> float:
        return self.store.duration

    @property
    def is_playing(self) -> bool:
        return self.state is not TransportState.STOPPED

    @property
    def current_region(self) -> Optional[Region]:
        if self._current is None or self._current not in self.store:
            return None
        return self.store.get(self._current)

    def is_near(self, position: float) -> bool:
        return abs(position - self.position) < settings.NEAR_THRESHOLD

    def set_current_region(self, region_id: Optional[RegionId]) -> None:
        self._current = region_id

    # --- commands ---

    def goto(self, position: float, keep_play_region: bool = False) -> None:
        if not keep_play_region:
            self._play_region = None
        position = min(max(0.0, float(position)), self.duration)
        self._current = self.store.region_at(position)
        if position == self.duration and self.is_playing:
            self._stop()
        if position != self.position:
            self.position = position
            self._seek_target = position
            if self.driver is not None:
                self.driver.seek(position)
        self._notify()

    def reset(self, position: float) -> None:
        """Re-seat the playhead after the buffer underneath it changed."""
        self._play_region = None
        self.position = min(max(0.0, float(position)), self.duration)
        self._current = self.store.region_at(self.position)
        self._seek_target = self.position
        if self.driver is not None:
            self.driver.seek(self.position)
        self._notify()

    def skip(self, amount: float) -> None:
        self.goto(self.position + amount)

    def set_loop(self, loop: bool) -> bool:
        self.looping = loop
        return loop

    def play(self) -> None:
        if self.region_only and self._start_region_only():
            return
        self._play_region = None
        self.state = TransportState.PLAYING
        if self.driver is not None:
            self.driver.play(self.position)
        self._notify()

    def pause(self) -> None:
        self._stop()
        self._notify()

    def toggle_play(self) -> bool:
        if self.is_playing:
            self.pause()
        else:
            self.play()
        return self.is_playing

    def play_region(self, span: RegionSpan) -> bool:
        """Play one region and stop at its end."""
        region_id = self.store.region_at(span.start)
        if region_id is None:
            return False
        region = self.store.get(region_id)
        if not region.contains(self.position):
            self.goto(region.start)
        self._begin_region_only(region)
        return True

    def previous_region(self) -> bool:
        current = self.current_region
        target = self.store.previous(current.id) if current else None
        if target is None:
            self.goto(0.0)
            self.pause()
            return False
        self.goto(self.store.get(target).start)
        self._current = target
        self.play()
        return True

    def next_region(self) -> bool:
        current = self.current_region
        target = self.store.next(current.id) if current else None
        if target is None:
            self.goto(self.duration)
            self.pause()
            return False
        self.goto(self.store.get(target).start)
        self._current = target
        self.play()
        return True

    # --- driver callbacks ---

    def on_position(self, position: float) -> None:
        if self._seek_target is not None:
            if abs(position - self._seek_target) >= settings.NEAR_THRESHOLD:
                logger.debug(f"Dropping stale position {position}, waiting for {self._seek_target}")
                return
            self._seek_target = None

        # region end comes first: a region may end exactly at the buffer end
        if self.state is TransportState.PLAYING_REGION_ONLY:
            region = self._region(self._play_region)
            if region is not None and position >= region.end:
                self.position = min(position, self.duration)
                if region.loop or self.looping:
                    self._restart(region)
                else:
                    self._stop()
                    self._notify()
                return

        if position >= self.duration:
            self.position = self.duration
            self.on_finished()
            return
        if position == self.position:
            return
        self.position = position

        if self.state is TransportState.PLAYING and self.looping:
            region = self.current_region
            if region is not None and position >= region.end:
                self._restart(region)
                return

        if not self.looping:
            self._current = self.store.region_at(position)
        self._notify()

    def on_finished(self) -> None:
        """The driver ran out of samples; its stream is no longer running."""
        region = self._looping_region()
        if region is not None:
            self._restart(region, resume=True)
            return
        # the driver's last report can trail the real end by a few ms
        if self.duration - self.position < settings.END_SNAP_THRESHOLD:
            self.position = self.duration
        self._stop()
        self._notify()

    # --- internals ---

    def _region(self, region_id: Optional[RegionId]) -> Optional[Region]:
        if region_id is None or region_id not in self.store:
            return None
        return self.store.get(region_id)

    def _looping_region(self) -> Optional[Region]:
        if self.state is TransportState.PLAYING_REGION_ONLY:
            region = self._region(self._play_region)
            if region is not None and (region.loop or self.looping):
                return region
            return None
        if self.state is TransportState.PLAYING and self.looping:
            return self.current_region
        return None

    def _start_region_only(self) -> bool:
        region = self.current_region
        if (
            region is not None
            and not region.loop
            and round(region.start, 1) <= round(self.position, 1)
            and region.end > self.position + 0.01
        ):
            self._begin_region_only(region)
            return True
        self._play_region = None
        return False

    def _begin_region_only(self, region: Region) -> None:
        self._current = region.id
        self._play_region = region.id
        self.state = TransportState.PLAYING_REGION_ONLY
        if self.driver is not None:
            self.driver.play(self.position)
        self._notify()

    def _restart(self, region: Region, resume: bool = False) -> None:
        self.position = region.start
        self._seek_target = region.start
        if self.driver is not None:
            self.driver.seek(region.start)
            if resume:
                self.driver.play(region.start)
        self._notify()

    def _stop(self) -> None:
        self.state = TransportState.STOPPED
        self._play_region = None
        if self.driver is not None:
            self.driver.pause()
