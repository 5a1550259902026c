import logging
import queue
from typing import Callable, Optional, Tuple

import numpy as np
import sounddevice as sd

from audio_regions.domain.sample_buffer import SampleBuffer

logger = logging.getLogger(__name__)

POSITION = "position"
FINISHED = "finished"

StreamEvent = Tuple[str, float]


class AudioEngine:
    """
    Playback driver over a sounddevice output stream.

    The PortAudio callback only copies frames and queues position/finish
    events. dispatch_events() hands them to the connected listeners on the
    caller's thread, so the stream is never stopped from inside its own
    callback.
    """

    def __init__(self, blocksize: int = 1024, max_events: int = 2000):
        self._output_stream = None
        self._buffer: Optional[SampleBuffer] = None
        self._frame = 0
        self._is_playing = False
        self._ended = False
        self._blocksize = blocksize
        self._events: "queue.Queue[StreamEvent]" = queue.Queue(maxsize=max_events)
        self._on_position: Optional[Callable[[float], None]] = None
        self._on_finished: Optional[Callable[[], None]] = None

    def connect(self, on_position: Callable[[float], None], on_finished: Callable[[], None]) -> None:
        self._on_position = on_position
        self._on_finished = on_finished

    def load(self, buffer: Optional[SampleBuffer]) -> None:
        self.pause()
        self._buffer = buffer
        self._frame = 0

    def is_playing(self) -> bool:
        return self._is_playing and not self._ended

    def seek(self, position: float) -> None:
        if self._buffer is None:
            return
        frame = int(position * self._buffer.sample_rate)
        self._frame = int(np.clip(frame, 0, self._buffer.frame_count))

    def play(self, position: float) -> None:
        buffer = self._buffer
        if buffer is None or buffer.is_empty():
            return
        self.seek(position)
        if self.is_playing():
            return
        # release a stream that ran to its end
        self.pause()
        self.seek(position)
        self._ended = False

        def callback(outdata, frames, time, status):
            if status:
                logger.warning(f"Output stream status: {status}")
            # Keep callback lightweight
            chunk = buffer.data[:, self._frame : self._frame + frames].T
            written = len(chunk)
            outdata[:written] = chunk
            outdata[written:] = 0
            self._frame += written
            self._post(POSITION, self._frame / buffer.sample_rate)
            if written < frames:
                self._ended = True
                self._post(FINISHED, self._frame / buffer.sample_rate)
                raise sd.CallbackStop

        self._output_stream = sd.OutputStream(
            samplerate=buffer.sample_rate,
            channels=buffer.channel_count,
            dtype="float32",
            blocksize=self._blocksize,
            callback=callback,
            finished_callback=self._stream_finished,
        )
        self._output_stream.start()
        self._is_playing = True

    def pause(self) -> None:
        if self._output_stream is None:
            return
        stream, self._output_stream = self._output_stream, None
        self._is_playing = False
        stream.stop()
        stream.close()
        # reports from the stopped stream are stale
        self._discard_events()

    def dispatch_events(self) -> int:
        """Deliver queued stream events on the calling thread. Returns how many were delivered."""
        delivered = 0
        while True:
            try:
                kind, position = self._events.get_nowait()
            except queue.Empty:
                return delivered
            delivered += 1
            if kind == POSITION and self._on_position is not None:
                self._on_position(position)
            elif kind == FINISHED and self._on_finished is not None:
                self._on_finished()

    def _post(self, kind: str, position: float) -> None:
        try:
            self._events.put_nowait((kind, position))
        except queue.Full:
            logger.warning(f"Dropping {kind} event; dispatch_events is not keeping up")

    def _discard_events(self) -> None:
        while True:
            try:
                self._events.get_nowait()
            except queue.Empty:
                return

    def _stream_finished(self) -> None:
        self._is_playing = False
