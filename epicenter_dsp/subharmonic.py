"""
Subharmonic Synthesis

Derives restored bass from the harmonic content that survived encoding.

The canonical strategy is a pair of cascaded zero-crossing frequency
dividers ("flip-flops"): the first toggles polarity on every rising zero
crossing of the harmonic band, producing a half-frequency square carrier;
the second divides that carrier again to a quarter frequency. Both carriers
are re-shaped by the band's amplitude envelope, smoothed with cascaded
lowpasses and blended by the width control.

Strategies are interchangeable behind SubharmonicSynthesisStrategy; see
spectral_synthesis.SpectralSynthesizer for the frequency-domain variant.
"""

import logging
from abc import ABC, abstractmethod
from typing import Dict, List, Optional, Tuple

import numpy as np

from .envelope import extract_envelope
from .filters import FilterCascade, FilterType
from .harmonics import extract_harmonic_band
from .parameters import DSPParameters
from .utils import BASS_TARGET_PEAK, SILENCE_THRESHOLD, normalize_peak, peak

logger = logging.getLogger(__name__)

DEFAULT_STRATEGY = "zero_crossing"
MAX_BASS_GAIN = 3.5


# =============================================================================
# FLIP-FLOP DIVIDER
# =============================================================================

class FlipFlopDivider:
    """
    Zero-crossing frequency divider.

    Two states (+1 / -1) and one transition: flip on a rising zero crossing
    (previous sample <= 0, current sample > 0).
    """

    def __init__(self, polarity: int = 1, last_sample: float = 0.0):
        self.polarity = polarity
        self.last_sample = last_sample

    def step(self, sample: float) -> int:
        """Consume one sample and return the current polarity."""
        if self.last_sample <= 0 and sample > 0:
            self.polarity = -self.polarity
        self.last_sample = sample
        return self.polarity

    def process_block(self, samples: np.ndarray) -> np.ndarray:
        """
        Vectorized equivalent of calling ``step`` on every sample.

        Returns:
            Polarity per sample as a float64 array of +1.0 / -1.0
        """
        samples = np.asarray(samples, dtype=np.float64)
        if samples.size == 0:
            return np.zeros(0)

        previous = np.empty_like(samples)
        previous[0] = self.last_sample
        previous[1:] = samples[:-1]

        rising = (previous <= 0) & (samples > 0)
        flips = np.cumsum(rising)
        polarity = np.where(flips % 2 == 0, 1.0, -1.0) * self.polarity

        self.polarity = int(polarity[-1])
        self.last_sample = float(samples[-1])
        return polarity


# =============================================================================
# WEIGHTS AND GAINS
# =============================================================================

def combine_weights(width: float) -> Tuple[float, float]:
    """
    Blend weights for the half- and quarter-frequency carriers.

    Returns:
        (fundamental_weight, deep_weight); wider settings favour the deep
        quarter-frequency component
    """
    width_factor = width / 100.0
    return 0.6 - 0.2 * width_factor, 0.4 + 0.3 * width_factor


def bass_gain(intensity: float) -> float:
    """Linear gain applied to the normalized restored bass (0 to 3.5)."""
    return (intensity / 100.0) * MAX_BASS_GAIN


# =============================================================================
# STRATEGY INTERFACE
# =============================================================================

class SubharmonicSynthesisStrategy(ABC):
    """
    Abstract base class for bass synthesis strategies.

    A strategy turns the mono reference into a restored-bass signal of the
    same length. Normalization and the intensity gain are applied afterwards
    by ``restore_bass`` so every strategy is gain-staged identically.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Registry identifier."""
        pass

    @abstractmethod
    def synthesize(
        self,
        mono: np.ndarray,
        sample_rate: float,
        params: DSPParameters
    ) -> np.ndarray:
        """
        Synthesize restored bass from the mono reference.

        Args:
            mono: Mono reference signal
            sample_rate: Sample rate in Hz
            params: Validated parameters

        Returns:
            Un-normalized restored bass, same length as ``mono``
        """
        pass


class ZeroCrossingSynthesizer(SubharmonicSynthesisStrategy):
    """Time-domain dual flip-flop synthesis (the live processing path)."""

    SMOOTH_RATIO = 1.5
    SMOOTH_Q = 0.707
    DEEP_RATIO = 0.8
    DEEP_Q = 0.5
    SMOOTHING_PASSES = 2

    @property
    def name(self) -> str:
        return "zero_crossing"

    def carriers(
        self,
        harmonics: np.ndarray,
        envelope: np.ndarray
    ) -> Tuple[np.ndarray, np.ndarray]:
        """
        Run both dividers.

        Returns:
            (half_frequency, quarter_frequency) envelope-shaped carriers
        """
        half = FlipFlopDivider().process_block(harmonics) * envelope
        quarter = FlipFlopDivider().process_block(half) * envelope
        return half, quarter

    def synthesize(
        self,
        mono: np.ndarray,
        sample_rate: float,
        params: DSPParameters
    ) -> np.ndarray:
        harmonics = extract_harmonic_band(mono, sample_rate, params.sweep_freq, params.width)
        envelope = extract_envelope(harmonics, sample_rate)
        half, quarter = self.carriers(harmonics, envelope)

        smooth_cutoff = params.sweep_freq * self.SMOOTH_RATIO
        deep_cutoff = params.sweep_freq * self.DEEP_RATIO

        fundamental = FilterCascade.repeated(
            FilterType.LOWPASS, smooth_cutoff, self.SMOOTH_Q, self.SMOOTHING_PASSES
        ).process(half, sample_rate)
        deep = FilterCascade.repeated(
            FilterType.LOWPASS, deep_cutoff, self.DEEP_Q, self.SMOOTHING_PASSES
        ).process(quarter, sample_rate)

        fundamental_weight, deep_weight = combine_weights(params.width)
        logger.debug(
            f"Zero-crossing synthesis: smooth={smooth_cutoff:.1f} Hz, "
            f"deep={deep_cutoff:.1f} Hz, weights={fundamental_weight:.2f}/{deep_weight:.2f}"
        )
        return fundamental * fundamental_weight + deep * deep_weight


# =============================================================================
# REGISTRY
# =============================================================================

class StrategyRegistry:
    """
    Registry of synthesis strategies.

    Usage:
        strategy = StrategyRegistry.get_or_default('spectral')
        bass = strategy.synthesize(mono, sample_rate, params)
    """

    _strategies: Dict[str, SubharmonicSynthesisStrategy] = {}
    _initialized: bool = False

    @classmethod
    def register(cls, strategy: SubharmonicSynthesisStrategy) -> None:
        cls._strategies[strategy.name.lower()] = strategy

    @classmethod
    def get(cls, name: str) -> Optional[SubharmonicSynthesisStrategy]:
        """Strategy by name (case-insensitive), or None."""
        cls._ensure_initialized()
        return cls._strategies.get(name.lower())

    @classmethod
    def get_or_default(cls, name: Optional[str]) -> SubharmonicSynthesisStrategy:
        """Strategy by name, falling back to the zero-crossing strategy."""
        if name:
            strategy = cls.get(name)
            if strategy is not None:
                return strategy
            logger.warning(f"Unknown synthesis strategy '{name}', using '{DEFAULT_STRATEGY}'")
        return cls.get(DEFAULT_STRATEGY)

    @classmethod
    def available(cls) -> List[str]:
        cls._ensure_initialized()
        return sorted(cls._strategies)

    @classmethod
    def _ensure_initialized(cls) -> None:
        """Register built-in strategies on first access."""
        if cls._initialized:
            return
        from .spectral_synthesis import SpectralSynthesizer

        cls.register(ZeroCrossingSynthesizer())
        cls.register(SpectralSynthesizer())
        cls._initialized = True


# =============================================================================
# BASS RESTORATION
# =============================================================================

def restore_bass(
    mono: np.ndarray,
    sample_rate: float,
    params: DSPParameters,
    strategy: Optional[SubharmonicSynthesisStrategy] = None
) -> np.ndarray:
    """
    Synthesize, normalize to 0.8 peak, and apply the intensity gain.

    Near-silent synthesized bass (peak below the silence threshold) is
    returned as synthesized, without normalization or gain.

    Args:
        mono: Mono reference signal
        sample_rate: Sample rate in Hz
        params: Validated parameters
        strategy: Synthesis strategy (default zero-crossing)

    Returns:
        Restored bass ready for mixing
    """
    if strategy is None:
        strategy = StrategyRegistry.get_or_default(DEFAULT_STRATEGY)

    bass = strategy.synthesize(mono, sample_rate, params)
    if peak(bass) < SILENCE_THRESHOLD:
        return np.array(bass, dtype=np.float64, copy=True)
    bass = normalize_peak(bass, BASS_TARGET_PEAK)
    return bass * bass_gain(params.intensity)
