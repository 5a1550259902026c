import logging

from audio_regions.services.buffer_editor import replace_range
from audio_regions.services.codec import decode_async
from audio_regions.services.editor_session import EditorSession

logger = logging.getLogger(__name__)


class ReplaceRegionAudio:
    """
    Use case for swapping the current region's samples for externally processed audio.
    Without a current region the processed audio replaces the whole buffer.
    """

    def __init__(self, session: EditorSession):
        self.session = session

    async def execute(self, blob: bytes) -> float:
        material = await decode_async(blob)
        session = self.session
        session.undo.snapshot(session.buffer)

        region = session.current_region
        if region is None or not session.has_audio():
            session.replace_buffer(material, 0.0)
            return 0.0

        new_buffer, position = replace_range(session.buffer, material, region.start, region.end)
        logger.info(f"Replaced {region.start:.3f}-{region.end:.3f}s with {material.duration_seconds:.3f}s")
        session.replace_buffer(new_buffer, position)
        return position
