import logging
from typing import Optional

from audio_regions.services.codec import decode_async
from audio_regions.services.editor_session import EditorSession
from audio_regions.use_cases.load_regions import LoadRegions

logger = logging.getLogger(__name__)


class LoadMedia:
    """
    Use case for opening a media blob in the session.
    A DecodeFailure propagates and leaves the previous buffer in place.
    """

    def __init__(self, session: EditorSession):
        self.session = session

    async def execute(
        self,
        blob: bytes,
        position: Optional[float] = None,
        regions: Optional[str] = None,
        loop: bool = False,
    ) -> float:
        buffer = await decode_async(blob)
        logger.info(
            f"Loaded {buffer.duration_seconds:.2f}s, {buffer.channel_count} channel(s) at {buffer.sample_rate} Hz"
        )
        self.session.undo.discard()
        self.session.replace_buffer(buffer, position)
        if regions:
            LoadRegions(self.session).execute(regions, loop=loop, goto_region=position is None)
        return self.session.duration
