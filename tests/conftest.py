# File: tests/conftest.py

import numpy as np
import pytest

from audio_regions.domain.region import RegionSpan
from audio_regions.domain.region_store import RegionStore
from audio_regions.domain.sample_buffer import SampleBuffer


@pytest.fixture
def make_buffer():
    """Factory for constant-amplitude buffers."""

    def _make(seconds: float, sample_rate: int = 100, channels: int = 1, value: float = 0.5) -> SampleBuffer:
        frames = int(round(seconds * sample_rate))
        return SampleBuffer(sample_rate, np.full((channels, frames), value, dtype=np.float32))

    return _make


@pytest.fixture
def speech_buffer() -> SampleBuffer:
    """
    32 s at 1024 Hz, loud (0.5) except half-second pauses ending at 8 s and 20 s.
    With a 0.25 s time threshold the peak bins land exactly on 1/16 s.
    """
    sample_rate = 1024
    data = np.full(32 * sample_rate, 0.5, dtype=np.float32)
    for boundary in (8, 20):
        data[boundary * sample_rate - sample_rate // 2 : boundary * sample_rate] = 0.0
    return SampleBuffer(sample_rate, data)


@pytest.fixture
def three_regions() -> RegionStore:
    """[0,4] [4,7] [7,10] over a 10 s buffer."""
    store = RegionStore(duration=10.0)
    store.load([RegionSpan(0.0, 4.0), RegionSpan(4.0, 7.0), RegionSpan(7.0, 10.0)])
    return store
