from typing import Optional

from audio_regions.domain.sample_buffer import SampleBuffer


class UndoManager:
    """Holds one pre-edit copy of the buffer. A new snapshot replaces the old one."""

    def __init__(self) -> None:
        self._snapshot: Optional[SampleBuffer] = None

    def snapshot(self, buffer: Optional[SampleBuffer]) -> None:
        self._snapshot = buffer.copy() if buffer is not None and buffer.frame_count > 1 else None

    def undo(self) -> Optional[SampleBuffer]:
        restored, self._snapshot = self._snapshot, None
        return restored

    def discard(self) -> None:
        self._snapshot = None

    @property
    def can_undo(self) -> bool:
        return self._snapshot is not None
