from typing import Optional, Union

from audio_regions.domain.sample_buffer import SampleBuffer
from audio_regions.services.buffer_editor import insert_audio
from audio_regions.services.codec import decode_async
from audio_regions.services.editor_session import EditorSession


class InsertAudio:
    """
    Use case for splicing new material (typically a finished recording) into the buffer.
    With overwrite_to the span [position, overwrite_to) is replaced; without it the
    material is appended.
    """

    def __init__(self, session: EditorSession):
        self.session = session

    async def execute(
        self,
        material: Union[bytes, SampleBuffer],
        position: Optional[float] = None,
        overwrite_to: Optional[float] = None,
    ) -> float:
        if isinstance(material, (bytes, bytearray)):
            material = await decode_async(bytes(material))
        session = self.session
        start = session.transport.position if position is None else position
        if material.is_empty():
            return start

        session.undo.snapshot(session.buffer)
        new_buffer, new_position = insert_audio(session.buffer, material, start, overwrite_to)
        session.replace_buffer(new_buffer, new_position)
        return new_position
