class AudioRegionsError(Exception):
    """Base error for the region engine."""


class DecodeFailure(AudioRegionsError):
    """Raised when a blob cannot be decoded into a SampleBuffer."""


class InvalidRegionBounds(AudioRegionsError, ValueError):
    """Raised when a region operation receives start >= end."""

    def __init__(self, start: float, end: float):
        super().__init__(f"Invalid region bounds: start={start} end={end}")
        self.start = start
        self.end = end
