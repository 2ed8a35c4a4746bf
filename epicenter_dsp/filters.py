"""
Biquad Filter Design and Engine

Second-order IIR filters based on the Robert Bristow-Johnson Audio EQ
Cookbook, applied with the direct-form-I recursion:

    y[n] = b0*x[n] + b1*x[n-1] + b2*x[n-2] - a1*y[n-1] - a2*y[n-2]

Higher effective orders are reached by cascading the same (or different)
designs as an explicit list of BiquadStage objects.

References:
- W3C Audio EQ Cookbook: https://www.w3.org/TR/audio-eq-cookbook/
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, List, Tuple

import numpy as np
from scipy.signal import lfilter, lfiltic


BUTTERWORTH_Q = 0.7071067811865476


class FilterDesignError(ValueError):
    """Raised when a filter cannot be designed (cutoff outside (0, Nyquist))."""
    pass


# =============================================================================
# FILTER TYPES
# =============================================================================

class FilterType(Enum):
    """Types of biquad filters available."""
    LOWPASS = "lowpass"
    HIGHPASS = "highpass"
    BANDPASS = "bandpass"


# =============================================================================
# COEFFICIENTS
# =============================================================================

@dataclass(frozen=True)
class BiquadCoefficients:
    """Normalized biquad taps (a0 is implicitly 1)."""
    b0: float
    b1: float
    b2: float
    a1: float
    a2: float

    def as_ba(self) -> Tuple[np.ndarray, np.ndarray]:
        """Return (b, a) arrays in scipy.signal layout."""
        return (
            np.array([self.b0, self.b1, self.b2]),
            np.array([1.0, self.a1, self.a2]),
        )


def design_biquad(
    filter_type: FilterType,
    cutoff: float,
    sample_rate: float,
    q: float = 1.0
) -> BiquadCoefficients:
    """
    Calculate biquad coefficients using the RBJ Audio EQ Cookbook.

    Args:
        filter_type: LOWPASS, HIGHPASS or BANDPASS
        cutoff: Corner/center frequency in Hz
        sample_rate: Sample rate in Hz
        q: Quality factor

    Returns:
        BiquadCoefficients normalized by a0

    Raises:
        FilterDesignError: If cutoff is not strictly between 0 and Nyquist,
            or q is not positive
    """
    nyquist = sample_rate / 2.0
    if not (0.0 < cutoff < nyquist):
        raise FilterDesignError(
            f"Cutoff {cutoff} Hz must lie in (0, {nyquist}) for sample rate {sample_rate}"
        )
    if q <= 0:
        raise FilterDesignError(f"Q must be positive, got {q}")

    w0 = 2 * np.pi * cutoff / sample_rate
    cos_w0 = np.cos(w0)
    sin_w0 = np.sin(w0)
    alpha = sin_w0 / (2 * q)

    if filter_type == FilterType.LOWPASS:
        b0 = (1 - cos_w0) / 2
        b1 = 1 - cos_w0
        b2 = (1 - cos_w0) / 2

    elif filter_type == FilterType.HIGHPASS:
        b0 = (1 + cos_w0) / 2
        b1 = -(1 + cos_w0)
        b2 = (1 + cos_w0) / 2

    elif filter_type == FilterType.BANDPASS:
        b0 = alpha
        b1 = 0.0
        b2 = -alpha

    else:
        raise ValueError(f"Unknown filter type: {filter_type}")

    a0 = 1 + alpha
    a1 = -2 * cos_w0
    a2 = 1 - alpha

    return BiquadCoefficients(
        b0=float(b0 / a0),
        b1=float(b1 / a0),
        b2=float(b2 / a0),
        a1=float(a1 / a0),
        a2=float(a2 / a0),
    )


# =============================================================================
# BIQUAD FILTER CLASS
# =============================================================================

@dataclass
class BiquadState:
    """Two-sample input/output history for one filter application."""
    x1: float = 0.0
    x2: float = 0.0
    y1: float = 0.0
    y2: float = 0.0

    def reset(self):
        self.x1 = self.x2 = self.y1 = self.y2 = 0.0


class BiquadFilter:
    """
    Single biquad filter with state.

    Uses Direct Form I. ``process_sample`` and ``process_block`` run the same
    recursion and share the same state, so a buffer can be processed in any
    mix of single samples and blocks.
    """

    def __init__(self, coefficients: BiquadCoefficients):
        self.coefficients = coefficients
        self.state = BiquadState()

    def reset(self):
        """Reset filter state."""
        self.state.reset()

    def process_sample(self, x: float) -> float:
        """Process a single sample through the DF-I recursion."""
        c = self.coefficients
        s = self.state
        y = c.b0 * x + c.b1 * s.x1 + c.b2 * s.x2 - c.a1 * s.y1 - c.a2 * s.y2
        s.x2, s.x1 = s.x1, x
        s.y2, s.y1 = s.y1, y
        return y

    def process_block(self, audio: np.ndarray) -> np.ndarray:
        """
        Process a block of samples.

        Vectorized through scipy.signal.lfilter, with initial conditions
        derived from the current DF-I history so the result matches
        sample-by-sample processing.
        """
        audio = np.asarray(audio, dtype=np.float64)
        if audio.size == 0:
            return audio.copy()

        b, a = self.coefficients.as_ba()
        s = self.state
        zi = lfiltic(b, a, y=[s.y1, s.y2], x=[s.x1, s.x2])
        output, _ = lfilter(b, a, audio, zi=zi)

        if len(audio) >= 2:
            s.x1, s.x2 = float(audio[-1]), float(audio[-2])
            s.y1, s.y2 = float(output[-1]), float(output[-2])
        else:
            s.x2, s.x1 = s.x1, float(audio[-1])
            s.y2, s.y1 = s.y1, float(output[-1])
        return output


def apply_biquad(
    audio: np.ndarray,
    filter_type: FilterType,
    cutoff: float,
    sample_rate: float,
    q: float = 1.0
) -> np.ndarray:
    """
    Design a biquad and apply it to a buffer with fresh zero state.

    Pure function: the input is not modified.
    """
    coefficients = design_biquad(filter_type, cutoff, sample_rate, q)
    return BiquadFilter(coefficients).process_block(audio)


# =============================================================================
# CASCADES
# =============================================================================

@dataclass(frozen=True)
class BiquadStage:
    """One stage of a filter cascade."""
    filter_type: FilterType
    cutoff: float
    q: float = BUTTERWORTH_Q


@dataclass
class FilterCascade:
    """
    Ordered list of biquad stages applied in sequence.

    Usage:
        >>> cascade = FilterCascade.repeated(FilterType.LOWPASS, 60.0, passes=2)
        >>> smoothed = cascade.process(signal, 44100)
    """
    stages: List[BiquadStage] = field(default_factory=list)

    @classmethod
    def repeated(
        cls,
        filter_type: FilterType,
        cutoff: float,
        q: float = BUTTERWORTH_Q,
        passes: int = 2
    ) -> "FilterCascade":
        """Cascade of ``passes`` identical stages."""
        return cls([BiquadStage(filter_type, cutoff, q) for _ in range(passes)])

    def extend(self, stages: Iterable[BiquadStage]) -> "FilterCascade":
        self.stages.extend(stages)
        return self

    def process(self, audio: np.ndarray, sample_rate: float) -> np.ndarray:
        """Run every stage over one owned buffer, each with zero state."""
        output = np.array(audio, dtype=np.float64, copy=True)
        designs = {}
        for stage in self.stages:
            key = (stage.filter_type, stage.cutoff, stage.q)
            if key not in designs:
                designs[key] = design_biquad(stage.filter_type, stage.cutoff, sample_rate, stage.q)
            output = BiquadFilter(designs[key]).process_block(output)
        return output

    def __len__(self) -> int:
        return len(self.stages)
