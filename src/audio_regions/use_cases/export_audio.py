from typing import Optional

from audio_regions.config.settings import settings
from audio_regions.services.buffer_editor import slice_range
from audio_regions.services.codec import encode_wav
from audio_regions.services.editor_session import EditorSession


class ExportAudio:
    """Use case for encoding the buffer, or just the current region, as WAV bytes."""

    def __init__(self, session: EditorSession):
        self.session = session

    def execute(self, region_only: bool = False, is_float: Optional[bool] = None) -> Optional[bytes]:
        buffer = self.session.buffer
        if buffer is None:
            return None
        is_float = settings.WAV_FLOAT if is_float is None else is_float

        region = self.session.current_region
        if region_only and region is not None and region.end > region.start:
            buffer = slice_range(buffer, region.start, region.end)
        return encode_wav(buffer, is_float=is_float)
