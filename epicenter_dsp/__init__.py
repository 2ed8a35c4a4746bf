"""
Epicenter DSP

Offline bass restoration and vocal reverb for fully buffered audio:
subharmonic synthesis from the surviving harmonics, a comb reverb on the
voice band, balance mixing and peak limiting.
"""

__version__ = "0.1.0"

from .parameters import (
    DSPParameters,
    PARAM_RANGES,
    PARAM_DEFAULTS,
    validate_params,
)
from .presets import (
    GenrePreset,
    GENRE_PRESETS,
    get_preset,
    list_presets,
    preset_to_dict,
)
from .filters import (
    FilterDesignError,
    FilterType,
    BiquadCoefficients,
    BiquadFilter,
    BiquadStage,
    FilterCascade,
    design_biquad,
    apply_biquad,
)
from .envelope import extract_envelope
from .harmonics import HarmonicBand, compute_harmonic_band, extract_harmonic_band
from .subharmonic import (
    FlipFlopDivider,
    SubharmonicSynthesisStrategy,
    ZeroCrossingSynthesizer,
    StrategyRegistry,
    restore_bass,
)
from .spectral_synthesis import SpectralSynthesizer
from .reverb import CombLine, CombReverb, apply_reverb
from .limiter import PeakLimiter, PeakLimiterParams, limit_peak
from .mixer import extract_voice_band, balance_weights, finalize_mix
from .spectrum import (
    SpectrumData,
    ComparisonSpectrum,
    generate_spectrum_data,
    generate_fft_spectrum_data,
    generate_comparison_spectrum,
)
from .pipeline import (
    SignalBuffer,
    ProcessingResult,
    EpicenterProcessor,
    process_audio,
)
from .config import ProcessingConfig, ProcessingStep
from .config_loader import ConfigLoader, ConfigLoadError
from .audio_io import AudioIOError, read_audio, write_audio

__all__ = [
    "DSPParameters",
    "PARAM_RANGES",
    "PARAM_DEFAULTS",
    "validate_params",
    "GenrePreset",
    "GENRE_PRESETS",
    "get_preset",
    "list_presets",
    "preset_to_dict",
    "FilterDesignError",
    "FilterType",
    "BiquadCoefficients",
    "BiquadFilter",
    "BiquadStage",
    "FilterCascade",
    "design_biquad",
    "apply_biquad",
    "extract_envelope",
    "HarmonicBand",
    "compute_harmonic_band",
    "extract_harmonic_band",
    "FlipFlopDivider",
    "SubharmonicSynthesisStrategy",
    "ZeroCrossingSynthesizer",
    "StrategyRegistry",
    "restore_bass",
    "SpectralSynthesizer",
    "CombLine",
    "CombReverb",
    "apply_reverb",
    "PeakLimiter",
    "PeakLimiterParams",
    "limit_peak",
    "extract_voice_band",
    "balance_weights",
    "finalize_mix",
    "SpectrumData",
    "ComparisonSpectrum",
    "generate_spectrum_data",
    "generate_fft_spectrum_data",
    "generate_comparison_spectrum",
    "SignalBuffer",
    "ProcessingResult",
    "EpicenterProcessor",
    "process_audio",
    "ProcessingConfig",
    "ProcessingStep",
    "ConfigLoader",
    "ConfigLoadError",
    "AudioIOError",
    "read_audio",
    "write_audio",
]
