"""
Restoration Pipeline

Top-level orchestration of the bass restoration and vocal reverb chain:

    channels -> mono reference -> restored bass  \
                               -> voice band      -> balance mix -> volume -> limiter

Every call is a pure function of its inputs. The caller's buffer is never
mutated, and the output always has the input's channel count, length and
sample rate with a peak no higher than the output ceiling.

Usage:
    >>> buffer = SignalBuffer.from_channels([left, right], 44100)
    >>> restored = process_audio(buffer, {"sweepFreq": 42, "intensity": 80})
"""

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Mapping, Optional, Sequence, Union

import numpy as np

from .config import ProcessingConfig, ProcessingStep, STEP_PROGRESS
from .limiter import PeakLimiter, PeakLimiterParams
from .mixer import extract_voice_band, finalize_mix
from .parameters import DSPParameters, validate_params
from .spectrum import ComparisonSpectrum, generate_comparison_spectrum
from .subharmonic import (
    StrategyRegistry,
    SubharmonicSynthesisStrategy,
    restore_bass,
)
from .utils import OUTPUT_CEILING, SILENCE_THRESHOLD, peak, to_mono

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[str, float], None]
ParamsLike = Union[None, Mapping[str, Any], DSPParameters]


# =============================================================================
# SIGNAL BUFFER
# =============================================================================

@dataclass
class SignalBuffer:
    """
    Fully buffered multichannel PCM signal.

    Attributes:
        channels: float32 array shaped (n_channels, n_samples)
        sample_rate: Sample rate in Hz
    """
    channels: np.ndarray
    sample_rate: int

    def __post_init__(self):
        if self.sample_rate is None or self.sample_rate <= 0:
            raise ValueError(f"Sample rate must be positive, got {self.sample_rate}")
        self.sample_rate = int(self.sample_rate)

        try:
            data = np.array(self.channels, dtype=np.float32)
        except ValueError as e:
            raise ValueError(f"Channels must have equal length: {e}") from e

        if data.ndim == 1:
            data = data[np.newaxis, :]
        if data.ndim != 2:
            raise ValueError(f"Expected (n_channels, n_samples) data, got shape {data.shape}")
        if data.shape[0] == 0:
            raise ValueError("Signal buffer needs at least one channel")
        self.channels = data

    @classmethod
    def from_channels(cls, channels: Sequence[np.ndarray], sample_rate: int) -> "SignalBuffer":
        """Build a buffer from a sequence of equal-length 1-D channel arrays."""
        channels = list(channels)
        if not channels:
            raise ValueError("Signal buffer needs at least one channel")
        lengths = {len(ch) for ch in channels}
        if len(lengths) > 1:
            raise ValueError(f"Channels must have equal length, got lengths {sorted(lengths)}")
        return cls(np.stack([np.asarray(ch, dtype=np.float32) for ch in channels]), sample_rate)

    @property
    def num_channels(self) -> int:
        return self.channels.shape[0]

    @property
    def num_samples(self) -> int:
        return self.channels.shape[1]

    @property
    def duration_seconds(self) -> float:
        return self.num_samples / self.sample_rate

    def to_mono(self) -> np.ndarray:
        """Equal-weight downmix as float64."""
        return to_mono(self.channels)


@dataclass
class ProcessingResult:
    """
    Processed audio together with its diagnostics.

    Attributes:
        original: Input buffer
        processed: Restored buffer
        spectrum: Original/processed comparison spectrum
        limiter_report: Final limiter summary
        params: Validated parameters actually used
        strategy: Synthesis strategy name
        elapsed_seconds: Wall time of the audio processing (spectrum excluded)
    """
    original: SignalBuffer
    processed: SignalBuffer
    spectrum: ComparisonSpectrum
    limiter_report: Dict[str, Any] = field(default_factory=dict)
    params: DSPParameters = field(default_factory=DSPParameters)
    strategy: str = ""
    elapsed_seconds: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        """Summary for logging/serialization (audio data excluded)."""
        return {
            "sample_rate": self.processed.sample_rate,
            "num_channels": self.processed.num_channels,
            "num_samples": self.processed.num_samples,
            "params": self.params.to_dict(),
            "strategy": self.strategy,
            "limiter": dict(self.limiter_report),
            "spectrum": self.spectrum.to_dict(),
            "elapsed_seconds": self.elapsed_seconds,
        }


# =============================================================================
# PROCESSOR
# =============================================================================

class EpicenterProcessor:
    """
    Runs the restoration chain with a fixed configuration.

    The processor keeps no per-call state, so one instance can serve
    any number of buffers (including from several threads).
    """

    def __init__(
        self,
        config: Optional[ProcessingConfig] = None,
        strategy: Union[None, str, SubharmonicSynthesisStrategy] = None
    ):
        self.config = config or ProcessingConfig()
        if isinstance(strategy, SubharmonicSynthesisStrategy):
            self.strategy = strategy
        else:
            self.strategy = StrategyRegistry.get_or_default(strategy or self.config.strategy)

    def process(
        self,
        buffer: SignalBuffer,
        params: ParamsLike = None,
        progress_callback: Optional[ProgressCallback] = None
    ) -> SignalBuffer:
        """
        Restore bass and (optionally) reverberate the voice band.

        Args:
            buffer: Input signal (not modified)
            params: Partial parameters; validated before use
            progress_callback: Optional callback(step, percent)

        Returns:
            New SignalBuffer with the input's shape and sample rate
        """
        processed, _, _ = self._run(buffer, params, progress_callback)
        return processed

    def process_with_spectrum(
        self,
        buffer: SignalBuffer,
        params: ParamsLike = None,
        progress_callback: Optional[ProgressCallback] = None
    ) -> ProcessingResult:
        """Process and compute the original/processed comparison spectrum."""
        start = time.perf_counter()
        processed, limiter, validated = self._run(buffer, params, progress_callback)
        elapsed = time.perf_counter() - start

        spectrum = generate_comparison_spectrum(
            buffer.channels,
            processed.channels,
            buffer.sample_rate,
            num_bins=self.config.spectrum_bins,
            window_size=self.config.spectrum_window,
            stride=self.config.spectrum_stride,
            max_workers=self.config.max_workers,
        )

        return ProcessingResult(
            original=buffer,
            processed=processed,
            spectrum=spectrum,
            limiter_report=limiter.get_report(),
            params=validated,
            strategy=self.strategy.name,
            elapsed_seconds=elapsed,
        )

    def _run(
        self,
        buffer: SignalBuffer,
        params: ParamsLike,
        progress_callback: Optional[ProgressCallback]
    ):
        start = time.perf_counter()

        self._report_progress(progress_callback, ProcessingStep.VALIDATING)
        validated = validate_params(params)
        sample_rate = buffer.sample_rate

        self._report_progress(progress_callback, ProcessingStep.DOWNMIXING)
        mono = buffer.to_mono()
        if peak(mono) < SILENCE_THRESHOLD:
            logger.warning("Input is near-silent; normalization stages will be skipped")

        self._report_progress(progress_callback, ProcessingStep.SYNTHESIZING_BASS)
        bass = restore_bass(mono, sample_rate, validated, self.strategy)

        self._report_progress(progress_callback, ProcessingStep.PROCESSING_VOICE)
        voice = extract_voice_band(
            mono, sample_rate, validated.reverb_enabled, validated.reverb_intensity
        )

        self._report_progress(progress_callback, ProcessingStep.MIXING)
        limiter = PeakLimiter(PeakLimiterParams(ceiling=OUTPUT_CEILING))
        output = finalize_mix(
            voice,
            bass,
            buffer.num_channels,
            validated.balance,
            validated.volume,
            limiter=limiter,
        )

        self._report_progress(progress_callback, ProcessingStep.COMPLETE)
        elapsed = time.perf_counter() - start
        logger.info(
            f"Processed {buffer.num_channels}ch x {buffer.num_samples} samples "
            f"@ {sample_rate} Hz with '{self.strategy.name}' in {elapsed:.2f}s "
            f"(sweep {validated.sweep_freq:.0f} Hz, intensity {validated.intensity:.0f}%)"
        )
        return SignalBuffer(output.astype(np.float32), sample_rate), limiter, validated

    @staticmethod
    def _report_progress(callback: Optional[ProgressCallback], step: str) -> None:
        """Report progress through callback if available."""
        if callback is None:
            return
        try:
            callback(step, STEP_PROGRESS[step])
        except Exception:
            # Progress is advisory; a broken callback must not abort processing
            logger.exception(f"Progress callback failed at step '{step}'")


# =============================================================================
# CONVENIENCE FUNCTIONS
# =============================================================================

def process_audio(
    buffer: SignalBuffer,
    params: ParamsLike = None,
    strategy: Union[None, str, SubharmonicSynthesisStrategy] = None,
    progress_callback: Optional[ProgressCallback] = None
) -> SignalBuffer:
    """
    Run the full restoration chain on a buffer.

    Args:
        buffer: Input signal
        params: Partial parameters (snake_case or camelCase keys)
        strategy: Strategy name or instance (default zero-crossing)
        progress_callback: Optional callback(step, percent)

    Returns:
        Processed SignalBuffer
    """
    return EpicenterProcessor(strategy=strategy).process(buffer, params, progress_callback)
