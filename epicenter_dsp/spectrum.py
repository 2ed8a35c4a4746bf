"""
Spectrum Analyzer

Diagnostic frequency views for comparing original and processed audio.

The primary analyzer is a direct, decimated correlation: for log-spaced
frequencies between 20 Hz and 2 kHz it correlates a Hann-weighted window
around the buffer midpoint (every 4th sample) against a cosine/sine pair.
It is not an FFT; the decimation trades accuracy above fs/8 for speed,
which is irrelevant in the bass region it is designed for.

A linear-binned FFT view is also provided for wider-band inspection.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Any, Dict, List

import numpy as np
from scipy.fft import rfft
from scipy.signal import get_window

from .utils import to_mono

logger = logging.getLogger(__name__)

DEFAULT_NUM_BINS = 128
DEFAULT_WINDOW_SIZE = 4096
DEFAULT_STRIDE = 4
MIN_ANALYSIS_FREQ = 20.0
MAX_ANALYSIS_FREQ = 2000.0


@dataclass
class SpectrumData:
    """Parallel frequency (Hz) and linear magnitude sequences."""
    frequencies: List[float] = field(default_factory=list)
    magnitudes: List[float] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.frequencies)

    def peak_frequency(self) -> float:
        """Frequency of the largest magnitude (0.0 if empty)."""
        if not self.magnitudes:
            return 0.0
        return self.frequencies[int(np.argmax(self.magnitudes))]

    def to_dict(self) -> Dict[str, List[float]]:
        return {"frequencies": list(self.frequencies), "magnitudes": list(self.magnitudes)}


@dataclass
class ComparisonSpectrum:
    """Side-by-side spectra of the original and processed signals."""
    original: SpectrumData
    processed: SpectrumData

    def to_dict(self) -> Dict[str, Any]:
        return {"original": self.original.to_dict(), "processed": self.processed.to_dict()}


def log_spaced_frequencies(
    num_bins: int = DEFAULT_NUM_BINS,
    min_freq: float = MIN_ANALYSIS_FREQ,
    max_freq: float = MAX_ANALYSIS_FREQ
) -> np.ndarray:
    """min_freq * (max_freq / min_freq) ** (k / (num_bins - 1)) for each k."""
    if num_bins < 2:
        return np.array([min_freq] * num_bins, dtype=np.float64)
    k = np.arange(num_bins)
    return min_freq * (max_freq / min_freq) ** (k / (num_bins - 1))


def generate_spectrum_data(
    audio: np.ndarray,
    sample_rate: float,
    num_bins: int = DEFAULT_NUM_BINS,
    window_size: int = DEFAULT_WINDOW_SIZE,
    stride: int = DEFAULT_STRIDE,
    min_freq: float = MIN_ANALYSIS_FREQ,
    max_freq: float = MAX_ANALYSIS_FREQ
) -> SpectrumData:
    """
    Log-spaced magnitude spectrum of a mono buffer.

    Args:
        audio: Mono signal
        sample_rate: Sample rate in Hz
        num_bins: Number of analysis frequencies
        window_size: Analysis window length, centred on the midpoint
        stride: Decimation factor inside the window
        min_freq: Lowest analysis frequency
        max_freq: Highest analysis frequency

    Returns:
        SpectrumData with ``num_bins`` entries
    """
    audio = np.asarray(audio, dtype=np.float64)
    frequencies = log_spaced_frequencies(num_bins, min_freq, max_freq)

    start = max(0, len(audio) // 2 - window_size // 2)
    end = min(start + window_size, len(audio))
    n = np.arange(start, end, stride)

    if n.size == 0:
        return SpectrumData(frequencies.tolist(), [0.0] * num_bins)

    t = (n - start) / window_size
    weighted = audio[n] * (0.5 * (1 - np.cos(2 * np.pi * t)))

    # Phase uses the absolute sample index, not the offset into the window
    angles = 2 * np.pi * np.outer(frequencies, n / sample_rate)
    real = np.cos(angles) @ weighted
    imag = np.sin(angles) @ weighted
    magnitudes = np.sqrt(real ** 2 + imag ** 2) / n.size

    return SpectrumData(frequencies.tolist(), magnitudes.tolist())


def generate_fft_spectrum_data(
    audio: np.ndarray,
    sample_rate: float,
    num_bins: int = 64,
    fft_size: int = 2048
) -> SpectrumData:
    """
    Linear-binned FFT spectrum of a segment starting a quarter of the way in.

    FFT bins below Nyquist are averaged in groups of
    ``(fft_size // 2) // num_bins``; each group is labelled by its centre
    frequency.
    """
    audio = np.asarray(audio, dtype=np.float64)
    window = get_window("hann", fft_size, fftbins=False)

    start = len(audio) // 4
    segment = np.zeros(fft_size)
    available = audio[start:start + fft_size]
    segment[:len(available)] = available * window[:len(available)]

    magnitude = np.abs(rfft(segment))[:fft_size // 2]
    bin_size = len(magnitude) // num_bins
    if bin_size < 1:
        raise ValueError(f"num_bins ({num_bins}) exceeds available FFT bins ({len(magnitude)})")

    frequencies = []
    magnitudes = []
    for i in range(num_bins):
        first = i * bin_size
        frequencies.append((first + bin_size / 2) * sample_rate / fft_size)
        magnitudes.append(float(np.sum(magnitude[first:first + bin_size]) / bin_size))

    return SpectrumData(frequencies, magnitudes)


def generate_comparison_spectrum(
    original: np.ndarray,
    processed: np.ndarray,
    sample_rate: float,
    num_bins: int = DEFAULT_NUM_BINS,
    window_size: int = DEFAULT_WINDOW_SIZE,
    stride: int = DEFAULT_STRIDE,
    max_workers: int = 2
) -> ComparisonSpectrum:
    """
    Spectra of the original and processed buffers, computed concurrently.

    Args:
        original: Original channels (n_channels, n_samples) or mono
        processed: Processed channels (n_channels, n_samples) or mono
        sample_rate: Sample rate in Hz
        max_workers: Worker threads (1 runs sequentially)

    Returns:
        ComparisonSpectrum
    """
    original_mono = to_mono(original)
    processed_mono = to_mono(processed)
    kwargs = dict(num_bins=num_bins, window_size=window_size, stride=stride)

    if max_workers <= 1:
        return ComparisonSpectrum(
            original=generate_spectrum_data(original_mono, sample_rate, **kwargs),
            processed=generate_spectrum_data(processed_mono, sample_rate, **kwargs),
        )

    with ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="Spectrum-") as executor:
        original_future = executor.submit(generate_spectrum_data, original_mono, sample_rate, **kwargs)
        processed_future = executor.submit(generate_spectrum_data, processed_mono, sample_rate, **kwargs)
        result = ComparisonSpectrum(
            original=original_future.result(),
            processed=processed_future.result(),
        )

    logger.debug(
        f"Spectrum peaks: original {result.original.peak_frequency():.1f} Hz, "
        f"processed {result.processed.peak_frequency():.1f} Hz"
    )
    return result
