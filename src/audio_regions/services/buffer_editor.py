"""
Sample-accurate splicing of SampleBuffers.

Every operation builds a new buffer and returns it with the playhead position
the edit leaves behind. Boundaries are truncated to three decimals before being
converted to frame indices with floor, so repeated edits do not drift.
"""
import logging
import math
from typing import Optional, Tuple

import numpy as np

from audio_regions.config.settings import settings
from audio_regions.domain.errors import InvalidRegionBounds
from audio_regions.domain.region import round_to_five_decimals
from audio_regions.domain.sample_buffer import SampleBuffer

logger = logging.getLogger(__name__)

EditResult = Tuple[SampleBuffer, float]


def snap(seconds: float, places: int = settings.BOUNDARY_DECIMALS) -> float:
    """Truncate toward zero at the given number of decimals."""
    factor = 10 ** places
    return math.trunc(seconds * factor) / factor


def frame_index(seconds: float, sample_rate: int) -> int:
    return int(math.floor(seconds * sample_rate))


def _conform(material: SampleBuffer, target: SampleBuffer) -> np.ndarray:
    """
    Material resampled to the target rate with the target's channel count.
    Missing channels repeat the material's first channel.
    """
    material = material.resampled(target.sample_rate)
    rows = [
        material.data[ix if ix < material.channel_count else 0]
        for ix in range(target.channel_count)
    ]
    return np.vstack(rows)


def insert_audio(
    original: Optional[SampleBuffer],
    material: SampleBuffer,
    start: Optional[float] = None,
    end: Optional[float] = None,
) -> EditResult:
    """
    Splice material into original.

    With end given, [start, end) of the original is overwritten; end == start
    is a pure insert. Without end the material is appended. Returns the new
    buffer and the position just after the inserted material.
    """
    if original is None or original.is_empty():
        return material, material.duration_seconds
    if material.is_empty():
        return original, start if start is not None else original.duration_seconds

    sample_rate = original.sample_rate
    incoming = _conform(material, original)
    length = original.frame_count

    if end is None:
        start_offset = after_offset = length
    else:
        start_offset = min(frame_index(snap(start or 0.0), sample_rate), length)
        after_offset = min(max(frame_index(snap(end), sample_rate), start_offset), length)

    data = np.concatenate(
        [original.data[:, :start_offset], incoming, original.data[:, after_offset:]],
        axis=1,
    )
    position = (start_offset + incoming.shape[1]) / sample_rate
    logger.debug(
        f"Inserted {incoming.shape[1]} frames at {start_offset}, overwriting {after_offset - start_offset}"
    )
    return SampleBuffer(sample_rate, data), round_to_five_decimals(position)


def delete_range(buffer: SampleBuffer, start: float, end: float) -> EditResult:
    """Remove [start, end); the playhead backs off slightly before the cut."""
    start, end = snap(start), snap(end)
    if start >= end:
        raise InvalidRegionBounds(start, end)
    if buffer.is_empty():
        return buffer, 0.0

    start_frame = min(frame_index(start, buffer.sample_rate), buffer.frame_count)
    end_frame = min(frame_index(end, buffer.sample_rate), buffer.frame_count)
    data = np.concatenate([buffer.data[:, :start_frame], buffer.data[:, end_frame:]], axis=1)

    position = max(0.0, start - settings.DELETE_BACKOFF)
    logger.debug(f"Deleted frames [{start_frame}, {end_frame})")
    return SampleBuffer(buffer.sample_rate, data), round_to_five_decimals(position)


def replace_range(buffer: SampleBuffer, material: SampleBuffer, start: float, end: float) -> EditResult:
    """Swap [start, end) for processed material of any length."""
    start, end = snap(start), snap(end)
    if start >= end:
        raise InvalidRegionBounds(start, end)
    if buffer.is_empty():
        return material, 0.0

    incoming = _conform(material, buffer)
    start_frame = min(frame_index(start, buffer.sample_rate), buffer.frame_count)
    end_frame = min(frame_index(end, buffer.sample_rate), buffer.frame_count)
    data = np.concatenate(
        [buffer.data[:, :start_frame], incoming, buffer.data[:, end_frame:]],
        axis=1,
    )
    position = (start_frame + incoming.shape[1]) / buffer.sample_rate
    return SampleBuffer(buffer.sample_rate, data), round_to_five_decimals(position)


def slice_range(buffer: SampleBuffer, start: float, end: float) -> SampleBuffer:
    """Copy of [start, end), used to export one region."""
    start, end = snap(start), snap(end)
    if start >= end:
        raise InvalidRegionBounds(start, end)
    start_frame = frame_index(start, buffer.sample_rate)
    end_frame = frame_index(end, buffer.sample_rate)
    return SampleBuffer(buffer.sample_rate, buffer.data[:, start_frame:end_frame].copy())
