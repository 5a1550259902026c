from typing import Optional

from audio_regions.domain.region import RegionParams
from audio_regions.services.auto_segmenter import auto_segment
from audio_regions.services.editor_session import EditorSession


class AutoSegmentRegions:
    """Use case for replacing the regions with ones proposed from silence and verses."""

    def __init__(self, session: EditorSession):
        self.session = session

    def execute(self, params: Optional[RegionParams] = None, loop: bool = False) -> int:
        session = self.session
        if params is not None:
            session.params = params
        if session.buffer is None:
            return 0

        spans = auto_segment(session.buffer, session.params, session.verses, session.peaks)
        session.store.load(spans, loop=loop, automated=True)
        if spans:
            session.transport.goto(spans[0].start)
        return len(spans)
