import logging
from typing import Optional

from audio_regions.services.buffer_editor import delete_range
from audio_regions.services.editor_session import EditorSession

logger = logging.getLogger(__name__)


class DeleteRegionAudio:
    """
    Use case for cutting the current region's samples out of the buffer.
    Returns the new playhead position, or None when there is nothing to cut.
    """

    def __init__(self, session: EditorSession):
        self.session = session

    def execute(self) -> Optional[float]:
        session = self.session
        region = session.current_region
        if region is None or session.buffer is None:
            return None

        start, end = region.start, region.end
        session.undo.snapshot(session.buffer)
        new_buffer, position = delete_range(session.buffer, start, end)
        logger.info(f"Deleted audio {start:.3f}-{end:.3f}s")
        session.replace_buffer(new_buffer, position)
        return position
