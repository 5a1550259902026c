import logging
import math
from typing import List, Optional, Sequence

import numpy as np

from audio_regions.domain.region import RegionParams, RegionSpan, round_to_five_decimals
from audio_regions.domain.sample_buffer import SampleBuffer
from audio_regions.services.peak_cache import PeakCache, peak_count

logger = logging.getLogger(__name__)


def _silence_clusters(peaks: np.ndarray, threshold: float) -> List[np.ndarray]:
    silent = np.flatnonzero(np.abs(peaks) < threshold)
    if silent.size == 0:
        return []
    # split wherever consecutive silent indices are not adjacent
    breaks = np.flatnonzero(np.diff(silent) != 1) + 1
    return np.split(silent, breaks)


def extract_regions(peaks: np.ndarray, duration: float, params: RegionParams) -> List[RegionSpan]:
    """
    Propose loud regions from a peak array.

    Silence clusters shorter than time_threshold are ignored. Each region
    keeps the silence that follows it, and regions shorter than
    seg_len_threshold are folded into their successor.
    """
    length = len(peaks)
    if length == 0 or duration <= 0:
        return []
    if not np.any(np.abs(peaks) >= params.silence_threshold):
        logger.debug("Buffer is silent; no regions proposed")
        return []

    coef = duration / length
    min_len_silence = math.ceil(params.time_threshold / coef)
    clusters = [c for c in _silence_clusters(peaks, params.silence_threshold) if len(c) >= min_len_silence]
    if not clusters:
        return [RegionSpan(0.0, round_to_five_decimals(duration))]

    # a loud region starts on the peak right after each silence
    starts = [round_to_five_decimals((int(cluster[-1]) + 1) * coef) for cluster in clusters]
    if starts[0] != 0:
        starts.insert(0, 0.0)

    regions = [
        RegionSpan(start, starts[index + 1] if index + 1 < len(starts) else duration)
        for index, start in enumerate(starts)
    ]

    ix = 0
    while ix < len(regions) - 1:
        if regions[ix].end - regions[ix].start < params.seg_len_threshold:
            regions[ix].end = regions[ix + 1].end
            del regions[ix + 1]
        else:
            ix += 1

    if regions and regions[-1].end - regions[-1].start < params.seg_len_threshold:
        regions.pop()
    if regions:
        regions[-1].end = duration
    return regions


def _overlaps(verses: Sequence[RegionSpan], regions: Sequence[RegionSpan]) -> bool:
    audio_start = regions[0].start
    audio_end = regions[-1].end
    return any(v.start < audio_end and v.end > audio_start for v in verses)


def merge_verses(
    regions: List[RegionSpan],
    verses: Optional[Sequence[RegionSpan]],
    min_len: float,
) -> List[RegionSpan]:
    """
    Reconcile detected regions with an external verse partition.

    Every boundary from both sets becomes a candidate; spans shorter than
    min_len are folded into the previous region unless their start is a
    verse boundary, in which case the span keeps growing until it is long
    enough. Regions take the label of the verse starting where they start.
    """
    if not verses:
        return regions
    if not regions or not _overlaps(verses, regions):
        return [RegionSpan(v.start, v.end, v.label) for v in verses]

    boundaries = sorted(
        {round_to_five_decimals(p) for r in (*verses, *regions) for p in (r.start, r.end)}
    )
    verse_starts = {}
    verse_edges = set()
    for verse in verses:
        start = round_to_five_decimals(verse.start)
        verse_starts.setdefault(start, verse.label)
        verse_edges.update((start, round_to_five_decimals(verse.end)))

    result: List[RegionSpan] = []
    start = boundaries[0]
    for end in boundaries[1:]:
        if end - start >= min_len:
            result.append(RegionSpan(start, end, verse_starts.get(start) or ""))
            start = end
        elif start not in verse_edges and result:
            result[-1].end = end
            start = end
    return result


def auto_segment(
    buffer: SampleBuffer,
    params: RegionParams,
    verses: Optional[Sequence[RegionSpan]] = None,
    peak_cache: Optional[PeakCache] = None,
) -> List[RegionSpan]:
    """Silence detection over the buffer, merged against verses when given."""
    cache = peak_cache if peak_cache is not None else PeakCache()
    duration = buffer.duration_seconds
    if buffer.is_empty():
        peaks = np.array([], dtype=np.float32)
    else:
        peaks = cache.peaks(buffer, peak_count(duration, params.time_threshold))

    regions = extract_regions(peaks, duration, params)
    merged = merge_verses(regions, verses, params.seg_len_threshold)
    logger.info(f"Auto-segmented {duration:.2f}s into {len(merged)} regions")
    return merged
