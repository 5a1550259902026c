import asyncio
import io
import logging
import struct

import numpy as np
import soundfile as sf

from audio_regions.domain.errors import DecodeFailure
from audio_regions.domain.sample_buffer import SampleBuffer

logger = logging.getLogger(__name__)

WAV_HEADER_SIZE = 44
FORMAT_PCM16 = 1
FORMAT_IEEE_FLOAT = 3


def wav_header(num_frames: int, num_channels: int, sample_rate: int, is_float: bool) -> bytes:
    """Canonical 44-byte RIFF/WAVE header."""
    bytes_per_sample = 4 if is_float else 2
    block_align = num_channels * bytes_per_sample
    byte_rate = sample_rate * block_align
    data_size = num_frames * block_align
    return struct.pack(
        "<4sI4s4sIHHIIHH4sI",
        b"RIFF",
        36 + data_size,
        b"WAVE",
        b"fmt ",
        16,
        FORMAT_IEEE_FLOAT if is_float else FORMAT_PCM16,
        num_channels,
        sample_rate,
        byte_rate,
        block_align,
        bytes_per_sample * 8,
        b"data",
        data_size,
    )


def interleave(data: np.ndarray) -> np.ndarray:
    """(channels, frames) -> frame-major flat array: L0 R0 L1 R1 ..."""
    return np.ascontiguousarray(np.asarray(data).T).reshape(-1)


def encode_wav(buffer: SampleBuffer, is_float: bool = False) -> bytes:
    samples = interleave(buffer.data)
    if is_float:
        payload = samples.astype("<f4").tobytes()
    else:
        clipped = np.clip(samples.astype(np.float32), -1.0, 1.0)
        payload = (clipped * 32767.0).astype("<i2").tobytes()
    header = wav_header(buffer.frame_count, buffer.channel_count, buffer.sample_rate, is_float)
    return header + payload


def decode(blob: bytes) -> SampleBuffer:
    """
    Decode any container the host libsndfile understands.
    Raises DecodeFailure for empty, malformed or unsupported input.
    """
    if not blob:
        raise DecodeFailure("Cannot decode an empty blob")
    try:
        data, sample_rate = sf.read(io.BytesIO(blob), dtype="float32", always_2d=True)
    except (RuntimeError, TypeError, ValueError) as e:
        logger.error(f"Decode failed: {e}")
        raise DecodeFailure(str(e)) from e
    # soundfile returns (frames, channels)
    return SampleBuffer(sample_rate=int(sample_rate), data=data.T)


async def decode_async(blob: bytes) -> SampleBuffer:
    """Decode off the event loop; callers await this before any region work."""
    return await asyncio.to_thread(decode, blob)
