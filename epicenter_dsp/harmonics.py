"""
Harmonic band extraction.

Isolates the "second harmonic" region around twice the sweep frequency.
The missing fundamental is later inferred from the zero crossings of this
band.
"""

import logging
from dataclasses import dataclass

import numpy as np

from .filters import BiquadStage, FilterCascade, FilterType

logger = logging.getLogger(__name__)

HARMONIC_Q = 1.5
MIN_LOW_CUTOFF = 40.0
MAX_HIGH_CUTOFF = 200.0


@dataclass(frozen=True)
class HarmonicBand:
    """Band edges derived from sweep frequency and width."""
    center: float
    bandwidth: float
    low_cutoff: float
    high_cutoff: float


def compute_harmonic_band(sweep_freq: float, width: float) -> HarmonicBand:
    """
    Compute the harmonic band for a sweep frequency and width.

    center = 2 * sweep, bandwidth = 30 + width / 2, edges clamped to
    [40, 200] Hz.
    """
    center = sweep_freq * 2
    bandwidth = 30 + width * 0.5
    return HarmonicBand(
        center=center,
        bandwidth=bandwidth,
        low_cutoff=max(MIN_LOW_CUTOFF, center - bandwidth),
        high_cutoff=min(MAX_HIGH_CUTOFF, center + bandwidth),
    )


def extract_harmonic_band(
    mono: np.ndarray,
    sample_rate: float,
    sweep_freq: float,
    width: float
) -> np.ndarray:
    """
    Lowpass at the upper edge, then highpass at the lower edge (Q 1.5 each).

    Args:
        mono: Mono reference signal
        sample_rate: Sample rate in Hz
        sweep_freq: Restoration center frequency (Hz)
        width: Width control (0-100)

    Returns:
        Band-limited harmonic signal
    """
    band = compute_harmonic_band(sweep_freq, width)
    logger.debug(
        f"Harmonic band: center={band.center:.1f} Hz, "
        f"{band.low_cutoff:.1f}-{band.high_cutoff:.1f} Hz"
    )
    cascade = FilterCascade([
        BiquadStage(FilterType.LOWPASS, band.high_cutoff, HARMONIC_Q),
        BiquadStage(FilterType.HIGHPASS, band.low_cutoff, HARMONIC_Q),
    ])
    return cascade.process(mono, sample_rate)
