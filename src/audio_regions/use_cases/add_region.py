from typing import Optional

from audio_regions.domain.region import RegionChange
from audio_regions.services.editor_session import EditorSession


class AddRegionAtPosition:
    """
    Use case for splitting the region under the playhead (or a given position).
    Returns the change to the split region, or None when nothing was split.
    """

    def __init__(self, session: EditorSession):
        self.session = session

    def execute(self, position: Optional[float] = None) -> Optional[RegionChange]:
        session = self.session
        transport = session.transport
        split = transport.position if position is None else position

        containing = session.store.region_at(split)
        before = session.store.get(containing) if containing is not None else None
        old_start = before.start if before else 0.0
        old_end = before.end if before else session.duration

        created = session.store.add_region(split)
        if created is None:
            return None

        created_region = session.store.get(created)
        # a fresh store with no split point yields one region covering everything
        new_end = created_region.start if created_region.start > old_start else created_region.end
        if before is not None and before.loop and new_end < old_end:
            transport.goto(old_start + 0.01)
        else:
            transport.set_current_region(session.store.region_at(transport.position))
        return RegionChange(old_start, old_end, old_start, new_end)
