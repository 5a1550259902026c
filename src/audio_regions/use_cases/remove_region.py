from typing import Optional

from audio_regions.domain.region import RegionChange
from audio_regions.domain.region_store import MergeDirection
from audio_regions.services.editor_session import EditorSession


class RemoveCurrentRegion:
    """Use case for removing the current region and merging it into a neighbour."""

    def __init__(self, session: EditorSession):
        self.session = session

    def execute(self, direction: Optional[MergeDirection] = None) -> Optional[RegionChange]:
        transport = self.session.transport
        region = transport.current_region
        if region is None:
            return None

        change = self.session.store.remove_and_merge(region.id, direction=direction, position=transport.position)
        transport.set_current_region(self.session.store.region_at(transport.position))
        return change
