"""
Envelope follower.

Full-wave rectification followed by a gentle lowpass, giving the slow
amplitude contour that is imposed on the synthesized subharmonic carriers.
"""

import numpy as np

from .filters import FilterType, apply_biquad

ENVELOPE_CUTOFF_HZ = 20.0
ENVELOPE_Q = 0.5


def extract_envelope(
    audio: np.ndarray,
    sample_rate: float,
    cutoff: float = ENVELOPE_CUTOFF_HZ,
    q: float = ENVELOPE_Q
) -> np.ndarray:
    """
    Amplitude envelope of a signal.

    Args:
        audio: Input signal
        sample_rate: Sample rate in Hz
        cutoff: Smoothing lowpass cutoff (default 20 Hz)
        q: Smoothing lowpass Q (default 0.5, no overshoot)

    Returns:
        Envelope array, same length as the input
    """
    rectified = np.abs(np.asarray(audio, dtype=np.float64))
    return apply_biquad(rectified, FilterType.LOWPASS, cutoff, sample_rate, q)
