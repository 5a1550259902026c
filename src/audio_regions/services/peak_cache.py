from typing import Optional

import numpy as np

from audio_regions.config.settings import settings
from audio_regions.domain.sample_buffer import SampleBuffer


def peak_count(duration_seconds: float, time_threshold: float) -> int:
    """One peak per time_threshold seconds, clamped to [512, 8192]."""
    wanted = int(np.floor(duration_seconds / time_threshold)) if time_threshold > 0 else 0
    return int(np.clip(wanted, settings.MIN_PEAKS, settings.MAX_PEAKS))


class PeakCache:
    """
    Downsampled absolute peaks of channel 0 for the session's buffer.
    The session invalidates it whenever the buffer is replaced.
    """

    def __init__(self) -> None:
        self._peaks: Optional[np.ndarray] = None
        self._bins = 0

    @staticmethod
    def build_peaks(data: np.ndarray, bins: int) -> np.ndarray:
        """Compress full signal into peak magnitudes, one per bin."""
        if bins <= 0 or data.size == 0:
            return np.array([], dtype=np.float32)

        magnitudes = np.abs(np.asarray(data, dtype=np.float32))
        # bin i covers samples [i*n//bins, (i+1)*n//bins); an empty bin
        # reduces to the sample at its start
        edges = (np.arange(bins, dtype=np.int64) * magnitudes.size) // bins
        return np.maximum.reduceat(magnitudes, edges).astype(np.float32)

    def peaks(self, buffer: SampleBuffer, bins: int) -> np.ndarray:
        if self._peaks is None or self._bins != bins:
            self._peaks = self.build_peaks(buffer.channel(0), bins)
            self._bins = bins
        return self._peaks

    def invalidate(self) -> None:
        self._peaks = None
        self._bins = 0

    @property
    def is_cached(self) -> bool:
        return self._peaks is not None
