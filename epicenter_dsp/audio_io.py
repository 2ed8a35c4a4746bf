"""
Audio file I/O for SignalBuffer.

Reads and writes uncompressed formats (WAV, FLAC, AIFF, ...) through
soundfile. soundfile works frame-major (n_samples, n_channels); buffers
are channel-major (n_channels, n_samples), so data is transposed at the
boundary.
"""

import logging
from pathlib import Path
from typing import Union

import numpy as np
import soundfile as sf

from .pipeline import SignalBuffer

logger = logging.getLogger(__name__)

DEFAULT_SUBTYPE = "PCM_16"


class AudioIOError(Exception):
    """Raised when an audio file cannot be read or written."""
    pass


def read_audio(path: Union[str, Path]) -> SignalBuffer:
    """
    Load an audio file as a float32 SignalBuffer.

    Raises:
        AudioIOError: If the file is missing or not a supported format
    """
    path = Path(path)
    if not path.exists():
        raise AudioIOError(f"Audio file not found: {path}")

    try:
        audio, sr = sf.read(str(path), dtype="float32", always_2d=True)
    except (RuntimeError, sf.LibsndfileError) as e:
        raise AudioIOError(f"Failed to read audio file {path}: {e}")

    if audio.shape[1] == 0:
        raise AudioIOError(f"Audio file has no channels: {path}")

    logger.debug(f"Read {path}: {audio.shape[1]}ch, {audio.shape[0]} samples @ {sr} Hz")
    return SignalBuffer(audio.T, sr)


def write_audio(
    path: Union[str, Path],
    buffer: SignalBuffer,
    subtype: str = DEFAULT_SUBTYPE
) -> Path:
    """
    Write a SignalBuffer to disk; the format follows the file extension.

    Args:
        path: Output path (parent directories are created)
        buffer: Signal to write
        subtype: soundfile subtype, e.g. 'PCM_16', 'PCM_24', 'FLOAT'

    Returns:
        The written path

    Raises:
        AudioIOError: If the file cannot be written
    """
    path = Path(path)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        sf.write(str(path), np.ascontiguousarray(buffer.channels.T), buffer.sample_rate, subtype=subtype)
    except (OSError, RuntimeError, ValueError, TypeError, sf.LibsndfileError) as e:
        raise AudioIOError(f"Failed to write audio file {path}: {e}")

    logger.debug(f"Wrote {path}: {buffer.num_channels}ch @ {buffer.sample_rate} Hz")
    return path
