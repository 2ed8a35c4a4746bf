"""
Pytest fixtures for epicenter_dsp tests.
"""
import pytest
import sys
from pathlib import Path

import numpy as np

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))


@pytest.fixture
def sample_rate():
    """Standard sample rate for tests."""
    return 44100


def make_sine(freq: float, duration: float, sample_rate: int, amplitude: float = 0.5) -> np.ndarray:
    """Plain sine tone."""
    t = np.arange(int(duration * sample_rate)) / sample_rate
    return amplitude * np.sin(2 * np.pi * freq * t)


@pytest.fixture
def sine_90hz(sample_rate):
    """One second of a 90 Hz sine (second harmonic of a 45 Hz fundamental)."""
    return make_sine(90.0, 1.0, sample_rate)


@pytest.fixture
def harmonic_tone(sample_rate):
    """
    One second of a thin 'bass-deficient' tone: harmonics at 90, 135 and
    180 Hz of a missing 45 Hz fundamental, plus some midrange.
    """
    return (
        make_sine(90.0, 1.0, sample_rate, 0.3)
        + make_sine(135.0, 1.0, sample_rate, 0.2)
        + make_sine(180.0, 1.0, sample_rate, 0.15)
        + make_sine(1000.0, 1.0, sample_rate, 0.2)
    )


@pytest.fixture
def stereo_buffer(harmonic_tone, sample_rate):
    """Stereo SignalBuffer with slightly different channels."""
    from epicenter_dsp.pipeline import SignalBuffer
    left = harmonic_tone
    right = harmonic_tone * 0.8
    return SignalBuffer.from_channels([left, right], sample_rate)


@pytest.fixture
def rng():
    """Deterministic random generator."""
    return np.random.default_rng(1234)
