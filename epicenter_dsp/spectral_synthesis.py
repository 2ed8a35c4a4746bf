"""
Spectral Subharmonic Synthesis

Frequency-domain alternative to the zero-crossing dividers. The harmonic
region (1.5x to 4x the sweep frequency) is analysed frame by frame with a
long STFT; its mean magnitude drives a synthesized Gaussian bump centred on
the sweep frequency plus fixed partials at half and twice the sweep. Frames
are resynthesized with windowed overlap-add, boosted, then steeply
lowpassed and blended with the original low end.

Key Features:
- 16384-sample Hann analysis window, 1/16 hop (93.75% overlap)
- Input phase preserved under the synthesized bump
- Width-dependent Q, lowpass cutoff and lowpass order
"""

import logging
import math

import numpy as np
from scipy.fft import rfft, irfft, rfftfreq
from scipy.signal import get_window

from .filters import BUTTERWORTH_Q, BiquadStage, FilterCascade, FilterType
from .parameters import DSPParameters
from .subharmonic import SubharmonicSynthesisStrategy

logger = logging.getLogger(__name__)


# =============================================================================
# CONSTANTS
# =============================================================================

WINDOW_SIZE = 16384
HOP_SIZE = WINDOW_SIZE // 16
SUBHARMONIC_BOOST = 45.0
SYNTHESIS_BOOST = 250.0
PARTIAL_BOOST = 100.0
MIN_HARMONIC_ENERGY = 0.01
OVERLAP_FLOOR = 0.001
ORIGINAL_BASS_MIX = 0.3


# =============================================================================
# WIDTH MAPPINGS
# =============================================================================

def calculate_q_factor(width: float) -> float:
    """Low width = narrow (Q 7.0), high width = broad (Q 2.0)."""
    return 2.0 + (100 - width) / 20.0


def calculate_cutoff_freq(width: float) -> float:
    """Post-synthesis lowpass cutoff, 55-90 Hz."""
    return 55 + width * 0.35


def calculate_filter_order(width: float) -> int:
    """Effective lowpass order, 6-10 (realized as order/2 biquad passes)."""
    order = math.floor(10 - (width / 100.0) * 4)
    return max(6, min(10, order))


# =============================================================================
# SPECTRAL SYNTHESIZER
# =============================================================================

class SpectralSynthesizer(SubharmonicSynthesisStrategy):
    """
    Windowed spectral-bin synthesis with overlap-add reconstruction.

    Usage:
        >>> synth = SpectralSynthesizer()
        >>> bass = synth.synthesize(mono, 44100, params)
    """

    def __init__(self, window_size: int = WINDOW_SIZE, hop_size: int = HOP_SIZE):
        self.window_size = window_size
        self.hop_size = hop_size
        self.window = get_window("hann", window_size, fftbins=False)

    @property
    def name(self) -> str:
        return "spectral"

    def extract_harmonics(
        self,
        mono: np.ndarray,
        sample_rate: float,
        sweep_freq: float
    ) -> np.ndarray:
        """Band-limit to [1.5x, 4x] sweep with Butterworth-Q biquads."""
        return FilterCascade([
            BiquadStage(FilterType.LOWPASS, sweep_freq * 4, BUTTERWORTH_Q),
            BiquadStage(FilterType.HIGHPASS, sweep_freq * 1.5, BUTTERWORTH_Q),
        ]).process(mono, sample_rate)

    def synthesize_frames(
        self,
        harmonics: np.ndarray,
        sample_rate: float,
        sweep_freq: float,
        width: float
    ) -> np.ndarray:
        """
        STFT analysis, per-frame synthesis and overlap-add.

        Returns zeros when the signal is shorter than one window.
        """
        n = self.window_size
        length = len(harmonics)
        output = np.zeros(length)
        overlap = np.zeros(length)

        num_frames = (length - n) // self.hop_size + 1 if length >= n else 0
        if num_frames <= 0:
            return output

        freqs = rfftfreq(n, 1.0 / sample_rate)
        resolution = sample_rate / n
        half = n // 2

        harmonic_mask = (freqs >= sweep_freq * 1.5) & (freqs <= sweep_freq * 4)
        harmonic_mask[half:] = False

        bandwidth = sweep_freq / calculate_q_factor(width)
        center_bin = int(round(sweep_freq / resolution))
        bandwidth_bins = int(round(bandwidth / resolution))
        bump_bins = np.arange(max(0, center_bin - bandwidth_bins),
                              min(half - 1, center_bin + bandwidth_bins) + 1)
        distance = np.abs(bump_bins * resolution - sweep_freq)
        sigma = bandwidth / 2
        gaussian = np.exp(-(distance ** 2) / (2 * sigma * sigma))

        sub_bin = int(round((sweep_freq / 2) / resolution))
        second_bin = int(round((sweep_freq * 2) / resolution))

        for frame in range(num_frames):
            start = frame * self.hop_size
            end = start + n
            spectrum = rfft(harmonics[start:end] * self.window)

            magnitudes = np.abs(spectrum[harmonic_mask])
            energy = float(np.mean(magnitudes)) if magnitudes.size else 0.0
            overlap[start:end] += self.window ** 2

            # Silent frames stay silent; the energy floor only lifts quiet ones
            if energy == 0.0:
                continue

            synth = np.zeros(half + 1, dtype=np.complex128)
            phase = np.angle(spectrum[bump_bins])
            magnitude = max(energy, MIN_HARMONIC_ENERGY) * gaussian * SYNTHESIS_BOOST
            synth[bump_bins] = magnitude * np.exp(1j * phase)

            if 0 < sub_bin < half:
                synth[sub_bin] += energy * PARTIAL_BOOST
            if 0 < second_bin < half:
                synth[second_bin] += energy * PARTIAL_BOOST

            output[start:end] += irfft(synth, n=n) * self.window

        covered = overlap > OVERLAP_FLOOR
        output[covered] /= overlap[covered]
        logger.debug(f"Spectral synthesis: {num_frames} frames, bump {len(bump_bins)} bins")
        return output * SUBHARMONIC_BOOST

    def synthesize(
        self,
        mono: np.ndarray,
        sample_rate: float,
        params: DSPParameters
    ) -> np.ndarray:
        harmonics = self.extract_harmonics(mono, sample_rate, params.sweep_freq)
        subharmonics = self.synthesize_frames(
            harmonics, sample_rate, params.sweep_freq, params.width
        )

        passes = math.ceil(calculate_filter_order(params.width) / 2)
        subharmonics = FilterCascade.repeated(
            FilterType.LOWPASS, calculate_cutoff_freq(params.width), BUTTERWORTH_Q, passes
        ).process(subharmonics, sample_rate)

        original_bass = FilterCascade.repeated(
            FilterType.LOWPASS, params.sweep_freq, BUTTERWORTH_Q, 1
        ).process(mono, sample_rate)

        return original_bass * ORIGINAL_BASS_MIX + subharmonics
