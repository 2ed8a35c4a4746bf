"""
Processing Configuration Module

Centralized configuration for the restoration pipeline and its command
line front end. All constants and defaults are defined here for easy
modification.
"""

from dataclasses import dataclass
from typing import Optional
import os


@dataclass
class ProcessingConfig:
    """
    Configuration for the bass restoration pipeline.

    Attributes:
        strategy: Subharmonic synthesis strategy name
        spectrum_bins: Number of log-spaced analysis frequencies
        spectrum_window: Analysis window length in samples
        spectrum_stride: Decimation factor inside the analysis window
        max_duration_seconds: Longest accepted input (0 disables the guard)
        max_workers: Threads used for the original/processed spectrum pair
        output_suffix: Appended to the input stem for default output names
        verbose: Enable verbose logging
        log_file: Optional log file path
    """
    # Synthesis
    strategy: str = "zero_crossing"

    # Spectrum analysis
    spectrum_bins: int = 128
    spectrum_window: int = 4096
    spectrum_stride: int = 4

    # Resource limits
    max_duration_seconds: float = 900.0  # 15 minutes
    max_workers: int = 2

    # Output
    output_suffix: str = "_epicenter"

    # Logging
    verbose: bool = False
    log_file: Optional[str] = None

    @classmethod
    def from_env(cls) -> "ProcessingConfig":
        """
        Create config from environment variables.

        Environment Variables:
            EPICENTER_STRATEGY: Synthesis strategy name
            EPICENTER_SPECTRUM_BINS: Analysis frequency count
            EPICENTER_SPECTRUM_WINDOW: Analysis window length
            EPICENTER_SPECTRUM_STRIDE: Analysis decimation factor
            EPICENTER_MAX_DURATION: Longest accepted input in seconds
            EPICENTER_MAX_WORKERS: Spectrum worker threads
            EPICENTER_OUTPUT_SUFFIX: Default output name suffix
            EPICENTER_VERBOSE: Enable verbose mode (1/true/yes)
            EPICENTER_LOG_FILE: Log file path
        """
        return cls(
            strategy=os.getenv("EPICENTER_STRATEGY", "zero_crossing"),
            spectrum_bins=int(os.getenv("EPICENTER_SPECTRUM_BINS", 128)),
            spectrum_window=int(os.getenv("EPICENTER_SPECTRUM_WINDOW", 4096)),
            spectrum_stride=int(os.getenv("EPICENTER_SPECTRUM_STRIDE", 4)),
            max_duration_seconds=float(os.getenv("EPICENTER_MAX_DURATION", 900.0)),
            max_workers=int(os.getenv("EPICENTER_MAX_WORKERS", 2)),
            output_suffix=os.getenv("EPICENTER_OUTPUT_SUFFIX", "_epicenter"),
            verbose=os.getenv("EPICENTER_VERBOSE", "").lower() in ("1", "true", "yes"),
            log_file=os.getenv("EPICENTER_LOG_FILE") or None,
        )


# Processing Steps (for progress reporting)
class ProcessingStep:
    """
    Enum-like class for pipeline checkpoint identifiers.
    Used for progress reporting with consistent step names.
    """
    VALIDATING = "validating"
    DOWNMIXING = "downmixing"
    SYNTHESIZING_BASS = "synthesizing_bass"
    PROCESSING_VOICE = "processing_voice"
    MIXING = "mixing"
    COMPLETE = "complete"


STEP_PROGRESS = {
    ProcessingStep.VALIDATING: 0.0,
    ProcessingStep.DOWNMIXING: 10.0,
    ProcessingStep.SYNTHESIZING_BASS: 30.0,
    ProcessingStep.PROCESSING_VOICE: 60.0,
    ProcessingStep.MIXING: 80.0,
    ProcessingStep.COMPLETE: 100.0,
}
