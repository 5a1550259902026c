import logging
from enum import Enum
from typing import Callable, Iterable, List, Optional

from audio_regions.config.settings import settings
from audio_regions.domain.errors import InvalidRegionBounds
from audio_regions.domain.region import (
    Marker,
    Region,
    RegionChange,
    RegionEvent,
    RegionId,
    RegionSpan,
    round_to_five_decimals,
)

logger = logging.getLogger(__name__)

RegionListener = Callable[[RegionEvent], None]


class MergeDirection(str, Enum):
    PREVIOUS = "previous"
    NEXT = "next"


class RegionStore:
    """
    Ordered regions for the currently loaded buffer.

    Regions live in a flat arena; each slot carries a generation counter so a
    RegionId issued before a delete never resolves to the slot's new tenant.
    In multi-region mode the prev/next handles form a chain sorted by start.
    """

    def __init__(self, duration: float = 0.0, single_region: bool = False):
        self.duration = float(duration)
        self.single_region = single_region
        self._slots: List[Optional[Region]] = []
        self._generations: List[int] = []
        self._free: List[int] = []
        self._head: Optional[RegionId] = None
        self._markers: List[Marker] = []
        self._listeners: List[RegionListener] = []

    # --- observers ---

    def subscribe(self, listener: RegionListener) -> None:
        self._listeners.append(listener)

    def unsubscribe(self, listener: RegionListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _emit(self, automated: bool) -> None:
        event = RegionEvent(count=self.count, automated=automated)
        for listener in list(self._listeners):
            listener(event)

    # --- arena ---

    def _allocate(self, start: float, end: float, label: str = "", loop: bool = False) -> Region:
        if self._free:
            index = self._free.pop()
            self._generations[index] += 1
        else:
            index = len(self._slots)
            self._slots.append(None)
            self._generations.append(0)
        region = Region(RegionId(index, self._generations[index]), start, end, label=label, loop=loop)
        self._slots[index] = region
        return region

    def _release(self, region_id: RegionId) -> None:
        self._slots[region_id.index] = None
        self._free.append(region_id.index)

    def _release_all(self) -> None:
        for region in self._slots:
            if region is not None:
                self._release(region.id)
        self._head = None

    def _lookup(self, region_id: Optional[RegionId]) -> Optional[Region]:
        if region_id is None or not 0 <= region_id.index < len(self._slots):
            return None
        region = self._slots[region_id.index]
        if region is None or region.id != region_id:
            return None
        return region

    def _relink(self, ordered: List[Region]) -> None:
        if self.single_region:
            for region in ordered:
                region.prev = region.next = None
            self._head = ordered[0].id if ordered else None
            return
        previous: Optional[Region] = None
        for region in ordered:
            region.prev = previous.id if previous else None
            if previous is not None:
                previous.next = region.id
            previous = region
        if previous is not None:
            previous.next = None
        self._head = ordered[0].id if ordered else None

    # --- queries ---

    def __contains__(self, region_id: RegionId) -> bool:
        return self._lookup(region_id) is not None

    def __len__(self) -> int:
        return self.count

    @property
    def count(self) -> int:
        return sum(1 for region in self._slots if region is not None)

    def get(self, region_id: RegionId) -> Region:
        region = self._lookup(region_id)
        if region is None:
            raise KeyError(f"Unknown or stale region id {region_id}")
        return region

    def ordered(self) -> List[Region]:
        """Regions in chain order, walked from the head."""
        if self.single_region:
            return sorted((r for r in self._slots if r is not None), key=lambda r: r.start)
        result: List[Region] = []
        region = self._lookup(self._head)
        while region is not None:
            result.append(region)
            region = self._lookup(region.next)
        return result

    def spans(self) -> List[RegionSpan]:
        return [region.to_span() for region in self.ordered()]

    def first(self) -> Optional[RegionId]:
        ordered = self.ordered()
        return ordered[0].id if ordered else None

    def next(self, region_id: RegionId) -> Optional[RegionId]:
        return self.get(region_id).next

    def previous(self, region_id: RegionId) -> Optional[RegionId]:
        return self.get(region_id).prev

    def region_at(self, position: float) -> Optional[RegionId]:
        """Region containing position; on a shared boundary the later region wins."""
        found: Optional[RegionId] = None
        for region in self.ordered():
            if region.contains(position):
                found = region.id
        return found

    def is_boundary(self, position: float) -> bool:
        return any(r.start == position or r.end == position for r in self.ordered())

    # --- mutations ---

    def reset(self, duration: float) -> None:
        """Bind the store to a new buffer; every region is invalidated."""
        self.duration = float(duration)
        self._release_all()
        self._emit(automated=True)

    def add_region(self, position: float, automated: bool = False) -> Optional[RegionId]:
        """Split the region containing position in two; returns the new right-hand region."""
        if self.single_region:
            logger.debug("add_region ignored in single region mode")
            return None
        position = round_to_five_decimals(position)

        if self.count == 0:
            if self.duration <= 0:
                return None
            first = self._allocate(0.0, round_to_five_decimals(self.duration))
            created = first
            if 0 < position < first.end:
                created = self._allocate(position, first.end)
                first.end = position
                self._relink([first, created])
            else:
                self._relink([first])
            self._emit(automated)
            return created.id

        if self.is_boundary(position):
            return None
        target = self._lookup(self.region_at(position))
        if target is None:
            logger.debug(f"No region contains {position}; nothing to split")
            return None

        ordered = self.ordered()
        index = ordered.index(target)
        created = self._allocate(position, target.end, loop=target.loop)
        target.end = position
        ordered.insert(index + 1, created)
        self._relink(ordered)
        self._emit(automated)
        return created.id

    def set_single(self, start: float, end: float, loop: bool = False, automated: bool = False) -> RegionId:
        """Single region mode: replace the one region with [start, end]."""
        if not self.single_region:
            raise ValueError("set_single is only available in single region mode")
        if start >= end:
            raise InvalidRegionBounds(start, end)
        self._release_all()
        region = self._allocate(round_to_five_decimals(start), round_to_five_decimals(end), loop=loop)
        self._relink([region])
        self._emit(automated)
        return region.id

    def remove(self, region_id: RegionId, automated: bool = False) -> None:
        """Delete a region without touching its neighbours."""
        region = self.get(region_id)
        ordered = [r for r in self.ordered() if r.id != region.id]
        self._release(region.id)
        self._relink(ordered)
        self._emit(automated)

    def remove_and_merge(
        self,
        region_id: RegionId,
        direction: Optional[MergeDirection] = None,
        position: Optional[float] = None,
        automated: bool = False,
    ) -> Optional[RegionChange]:
        """
        Remove a region and let a neighbour absorb its span.

        Without an explicit direction the previous region absorbs it when
        position is near the region start, otherwise the next one does. When
        the chosen side has no neighbour the other side is used, so the
        timeline stays covered.
        """
        region = self.get(region_id)
        if self.count == 1:
            self.clear(automated=automated)
            return None

        previous = self._lookup(region.prev)
        following = self._lookup(region.next)
        if direction is None:
            near_start = position is not None and abs(position - region.start) < settings.NEAR_THRESHOLD
            direction = MergeDirection.PREVIOUS if near_start and previous else MergeDirection.NEXT
        if direction is MergeDirection.NEXT and following is None:
            direction = MergeDirection.PREVIOUS
        if direction is MergeDirection.PREVIOUS and previous is None:
            direction = MergeDirection.NEXT

        survivor = previous if direction is MergeDirection.PREVIOUS else following
        if survivor is None:
            self.remove(region_id, automated=automated)
            return None

        old_start, old_end = survivor.start, survivor.end
        if direction is MergeDirection.PREVIOUS:
            survivor.end = region.end
        else:
            survivor.start = region.start

        ordered = [r for r in self.ordered() if r.id != region.id]
        self._release(region.id)
        self._relink(ordered)
        self._emit(automated)
        return RegionChange(old_start, old_end, survivor.start, survivor.end)

    def resize(
        self,
        region_id: RegionId,
        new_start: Optional[float] = None,
        new_end: Optional[float] = None,
        automated: bool = False,
    ) -> Region:
        """
        Move one or both edges of a region and repair the touching neighbours.

        An edge dragged past a neighbour's far edge is clamped so the neighbour
        keeps MIN_REGION_LENGTH. Chain extremities are pinned to 0 and duration.
        """
        region = self.get(region_id)
        start = region.start if new_start is None else max(0.0, float(new_start))
        end = region.end if new_end is None else float(new_end)
        if new_end is not None and self.duration > 0:
            end = min(self.duration, end)
        if start >= end:
            raise InvalidRegionBounds(start, end)

        if self.single_region:
            region.start = round_to_five_decimals(start)
            region.end = round_to_five_decimals(end)
            self._emit(automated)
            return region

        previous = self._lookup(region.prev)
        following = self._lookup(region.next)
        min_len = settings.MIN_REGION_LENGTH
        if previous is not None and new_start is not None and start < previous.start + min_len:
            logger.debug(f"Clamping start {start} to previous region {previous.start}")
            start = previous.start + min_len
        if following is not None and new_end is not None and end > following.end - min_len:
            logger.debug(f"Clamping end {end} to next region {following.end}")
            end = following.end - min_len
        if start >= end:
            raise InvalidRegionBounds(start, end)

        region.start = round_to_five_decimals(start)
        region.end = round_to_five_decimals(end)
        if previous is not None:
            previous.end = region.start
        else:
            region.start = 0.0
        if following is not None:
            following.start = region.end
        elif self.duration > 0:
            region.end = round_to_five_decimals(self.duration)

        self._emit(automated)
        return region

    def set_loop(self, loop: bool) -> None:
        for region in self.ordered():
            region.loop = loop

    def set_label(self, region_id: RegionId, label: str) -> None:
        self.get(region_id).label = label

    def clear(self, keep_markers: bool = True, automated: bool = False) -> List[Marker]:
        """Remove every region; markers survive unless keep_markers is False."""
        saved = list(self._markers)
        self._release_all()
        if not keep_markers:
            self._markers = []
        self._emit(automated)
        return saved

    def load(self, spans: Iterable[RegionSpan], loop: bool = False, automated: bool = False) -> int:
        """Replace every region with spans, sorted by start. Returns the loaded count."""
        self._release_all()
        accepted = sorted(
            (
                span
                for span in spans
                if span.start is not None and span.end - span.start > settings.MIN_LOADED_REGION_LENGTH
            ),
            key=lambda span: span.start,
        )
        if self.single_region:
            accepted = accepted[:1]

        created = [
            self._allocate(
                round_to_five_decimals(span.start),
                round_to_five_decimals(span.end),
                label=span.label or "",
                loop=loop,
            )
            for span in accepted
        ]
        self._relink(created)
        logger.debug(f"Loaded {len(created)} regions")
        self._emit(automated)
        return len(created)

    # --- markers ---

    def add_marker(self, time: float, label: str = "", color: str = "blue") -> Marker:
        marker = Marker(time=float(time), label=label or str(time), color=color)
        self._markers.append(marker)
        return marker

    def markers(self) -> List[Marker]:
        return sorted(self._markers, key=lambda m: m.time)

    def clear_markers(self) -> None:
        self._markers = []
