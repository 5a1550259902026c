from dataclasses import dataclass
import numpy as np


@dataclass
class SampleBuffer:
    """
    Decoded audio owned by one editor session.
    Holds sample_rate and a float32 array shaped (channels, frames).
    Edits never mutate a buffer in place; they build a new one.
    """
    sample_rate: int
    data: np.ndarray

    def __post_init__(self) -> None:
        arr = np.asarray(self.data, dtype=np.float32)
        if arr.ndim == 1:
            arr = arr.reshape(1, -1)
        elif arr.ndim != 2:
            raise ValueError(f"Sample data must be 1-D or 2-D, got {arr.ndim}-D")
        if arr.shape[0] == 0:
            raise ValueError("Sample data needs at least one channel.")
        if self.sample_rate <= 0:
            raise ValueError("Sample rate must be greater than zero.")
        self.data = arr

    @classmethod
    def empty(cls, sample_rate: int, channels: int = 1) -> "SampleBuffer":
        return cls(sample_rate, np.zeros((channels, 0), dtype=np.float32))

    @property
    def channel_count(self) -> int:
        return int(self.data.shape[0])

    @property
    def frame_count(self) -> int:
        return int(self.data.shape[1])

    @property
    def duration_seconds(self) -> float:
        """Return the duration of the buffer in seconds."""
        return self.frame_count / self.sample_rate

    def is_empty(self) -> bool:
        return self.frame_count == 0

    def channel(self, index: int) -> np.ndarray:
        return self.data[index]

    def copy(self) -> "SampleBuffer":
        return SampleBuffer(self.sample_rate, self.data.copy())

    def resampled(self, sample_rate: int) -> "SampleBuffer":
        """Linear-interpolation resample, used for material recorded at another rate."""
        if sample_rate == self.sample_rate:
            return self
        if self.frame_count == 0:
            return SampleBuffer.empty(sample_rate, self.channel_count)

        new_frames = int(self.frame_count * sample_rate / self.sample_rate)
        t_old = np.arange(self.frame_count, dtype=np.float64) / self.sample_rate
        t_new = np.arange(new_frames, dtype=np.float64) / sample_rate
        channels = [np.interp(t_new, t_old, ch).astype(np.float32) for ch in self.data]
        return SampleBuffer(sample_rate, np.vstack(channels))
