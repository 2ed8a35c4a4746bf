"""
Utility functions and constants for the bass restoration pipeline.

Provides:
- Default sample rate and gain-staging constants
- Downmixing helpers (N channels -> mono reference)
- Peak measurement and peak normalization with silence guard
- Time/sample conversions
"""

import logging
from typing import Sequence, Union

import numpy as np

logger = logging.getLogger(__name__)


# =============================================================================
# CONSTANTS
# =============================================================================

SAMPLE_RATE = 44100

# Peaks below this are treated as silence and never normalized
SILENCE_THRESHOLD = 0.001

BASS_TARGET_PEAK = 0.8
VOICE_TARGET_PEAK = 0.9
OUTPUT_CEILING = 0.95


# =============================================================================
# CHANNEL HELPERS
# =============================================================================

def to_mono(channels: Union[np.ndarray, Sequence[np.ndarray]]) -> np.ndarray:
    """
    Downmix a multichannel buffer to a mono reference signal.

    Channels are averaged with equal weight, so a stereo pair becomes
    (L + R) / 2 and a mono buffer is returned as a float64 copy.

    Args:
        channels: Array shaped (n_channels, n_samples) or a sequence of
                  equal-length 1-D arrays

    Returns:
        1-D float64 array
    """
    data = np.asarray(channels, dtype=np.float64)
    if data.ndim == 1:
        return data.copy()
    if data.shape[0] == 1:
        return data[0].copy()
    return np.mean(data, axis=0)


def peak(audio: np.ndarray) -> float:
    """Peak absolute magnitude over every sample (0.0 for empty input)."""
    if audio.size == 0:
        return 0.0
    return float(np.max(np.abs(audio)))


def normalize_peak(
    audio: np.ndarray,
    target: float,
    threshold: float = SILENCE_THRESHOLD
) -> np.ndarray:
    """
    Scale a signal so its peak magnitude equals ``target``.

    Near-silent signals (peak below ``threshold``) are returned unscaled
    to avoid dividing by a vanishing peak.

    Args:
        audio: Input signal (not modified)
        target: Desired peak magnitude
        threshold: Silence threshold

    Returns:
        New normalized array
    """
    current = peak(audio)
    if current < threshold:
        logger.debug(f"Peak {current:.6f} below {threshold}, skipping normalization")
        return np.array(audio, dtype=np.float64, copy=True)
    return audio * (target / current)


def ms_to_samples(ms: float, sample_rate: int) -> int:
    """Convert milliseconds to a rounded sample count (at least 1)."""
    return max(1, int(round(ms / 1000.0 * sample_rate)))


def rms(audio: np.ndarray) -> float:
    """Root-mean-square level (0.0 for empty input)."""
    if audio.size == 0:
        return 0.0
    return float(np.sqrt(np.mean(np.square(audio, dtype=np.float64))))


def linear_to_db(linear: float) -> float:
    """Convert linear amplitude to decibels."""
    if linear <= 0:
        return -np.inf
    return 20.0 * np.log10(linear)


def db_to_linear(db: float) -> float:
    """Convert decibels to linear amplitude."""
    return 10.0 ** (db / 20.0)
