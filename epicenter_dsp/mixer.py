"""
Mixer / Normalizer

Builds the voice/mid band, blends it with the restored bass according to
the balance control, applies the output volume and the final peak limit.
"""

import logging
from typing import Optional, Tuple

import numpy as np

from .filters import FilterType, apply_biquad
from .limiter import PeakLimiter, PeakLimiterParams
from .reverb import apply_reverb
from .utils import OUTPUT_CEILING, VOICE_TARGET_PEAK, normalize_peak

logger = logging.getLogger(__name__)

VOICE_HIGHPASS_HZ = 150.0
VOICE_HIGHPASS_Q = 0.707


def extract_voice_band(
    mono: np.ndarray,
    sample_rate: float,
    reverb_enabled: bool = False,
    reverb_intensity: float = 30.0
) -> np.ndarray:
    """
    Highpass the mono reference at 150 Hz, optionally reverberate, and
    normalize to a 0.9 peak (skipped for near-silent signals).
    """
    voice = apply_biquad(mono, FilterType.HIGHPASS, VOICE_HIGHPASS_HZ, sample_rate, VOICE_HIGHPASS_Q)
    if reverb_enabled:
        logger.debug(f"Applying comb reverb at intensity {reverb_intensity}")
        voice = apply_reverb(voice, int(sample_rate), reverb_intensity)
    return normalize_peak(voice, VOICE_TARGET_PEAK)


def balance_weights(balance: float) -> Tuple[float, float]:
    """
    Voice and bass weights for a balance setting (0-100).

    balance=0 gives (1.0, 0.3); balance=100 gives (0.3, 1.0). The bass
    never drops below 0.3.
    """
    balance_factor = balance / 100.0
    return 1 - 0.7 * balance_factor, 0.3 + 0.7 * balance_factor


def mix_channels(
    voice: np.ndarray,
    bass: np.ndarray,
    num_channels: int,
    balance: float
) -> np.ndarray:
    """
    Weighted voice + bass mix duplicated to every output channel.

    Returns:
        Array shaped (num_channels, n_samples)
    """
    voice_weight, bass_weight = balance_weights(balance)
    mono_mix = voice * voice_weight + bass * bass_weight
    return np.tile(mono_mix, (num_channels, 1))


def apply_volume(channels: np.ndarray, volume: float) -> np.ndarray:
    """Scale every sample by volume / 100."""
    return channels * (volume / 100.0)


def finalize_mix(
    voice: np.ndarray,
    bass: np.ndarray,
    num_channels: int,
    balance: float,
    volume: float,
    ceiling: float = OUTPUT_CEILING,
    limiter: Optional[PeakLimiter] = None
) -> np.ndarray:
    """
    Balance mix, volume gain and peak limiting in one call.

    Args:
        voice: Normalized voice band
        bass: Gain-staged restored bass
        num_channels: Output channel count
        balance: Balance control (0-100)
        volume: Volume control (0-150)
        ceiling: Peak ceiling
        limiter: Optional limiter instance (to read its report afterwards)

    Returns:
        Array shaped (num_channels, n_samples), peak <= ceiling
    """
    channels = apply_volume(mix_channels(voice, bass, num_channels, balance), volume)
    if limiter is None:
        limiter = PeakLimiter(PeakLimiterParams(ceiling=ceiling))
    return limiter.process(channels)
