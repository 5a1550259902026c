import logging
from typing import Iterable, Optional

from audio_regions.config.settings import settings
from audio_regions.domain.region import Region, RegionParams, RegionSpan
from audio_regions.domain.region_store import RegionStore
from audio_regions.domain.sample_buffer import SampleBuffer
from audio_regions.services.peak_cache import PeakCache
from audio_regions.services.transport import PlaybackDriver, Transport
from audio_regions.services.undo_manager import UndoManager

logger = logging.getLogger(__name__)


class EditorSession:
    """
    Everything the engine keeps for one open media item: the buffer, its
    regions, the peak cache, the undo snapshot and the transport.
    """

    def __init__(
        self,
        single_region: bool = False,
        params: Optional[RegionParams] = None,
        verses: Optional[Iterable[RegionSpan]] = None,
        driver: Optional[PlaybackDriver] = None,
    ):
        self.buffer: Optional[SampleBuffer] = None
        self.params = params or settings.default_region_params()
        self.verses = list(verses) if verses else []
        self.store = RegionStore(single_region=single_region)
        self.peaks = PeakCache()
        self.undo = UndoManager()
        self.driver = driver
        self.transport = Transport(self.store, driver, region_only=single_region)
        if driver is not None:
            driver.connect(self.transport.on_position, self.transport.on_finished)

    @property
    def duration(self) -> float:
        return self.buffer.duration_seconds if self.buffer is not None else 0.0

    @property
    def current_region(self) -> Optional[Region]:
        return self.transport.current_region

    def has_audio(self) -> bool:
        return self.buffer is not None and not self.buffer.is_empty()

    def replace_buffer(self, buffer: Optional[SampleBuffer], position: Optional[float] = None) -> None:
        """
        Install a new buffer. Peaks and regions describe the old samples, so
        both are dropped; markers survive.
        """
        was_playing = self.transport.is_playing
        if was_playing:
            self.transport.pause()

        self.buffer = buffer
        self.peaks.invalidate()
        self.store.reset(self.duration)
        if self.driver is not None:
            self.driver.load(buffer)

        self.transport.reset(self.duration if position is None else position)
        logger.debug(f"Buffer replaced: {self.duration:.3f}s, playhead {self.transport.position:.3f}")
        if was_playing and self.has_audio():
            self.transport.play()

    def process_playback_events(self) -> int:
        """
        Feed the driver's queued position and finish reports to the transport.
        Hosts call this from their own loop; the transport is never touched
        from the audio thread.
        """
        if self.driver is None:
            return 0
        return self.driver.dispatch_events()
