"""
Unit tests for the spectrum analyzer.
"""

import pytest
import numpy as np

from epicenter_dsp.spectrum import (
    ComparisonSpectrum,
    SpectrumData,
    generate_comparison_spectrum,
    generate_fft_spectrum_data,
    generate_spectrum_data,
    log_spaced_frequencies,
)
from conftest import make_sine


class TestLogFrequencies:
    """Tests for the analysis frequency grid."""

    def test_endpoints_and_count(self):
        freqs = log_spaced_frequencies(128, 20, 2000)
        assert len(freqs) == 128
        assert freqs[0] == pytest.approx(20)
        assert freqs[-1] == pytest.approx(2000)

    def test_constant_ratio(self):
        """Neighbouring frequencies share one ratio."""
        freqs = log_spaced_frequencies(16, 20, 2000)
        ratios = freqs[1:] / freqs[:-1]
        np.testing.assert_allclose(ratios, ratios[0])


class TestSpectrumData:
    """Tests for the correlation analyzer."""

    def test_bin_count(self, harmonic_tone, sample_rate):
        data = generate_spectrum_data(harmonic_tone, sample_rate)
        assert len(data) == 128
        assert len(data.frequencies) == len(data.magnitudes)

    def test_peak_near_100hz(self, sample_rate):
        """A 100 Hz sine peaks at the grid frequency closest to 100 Hz."""
        tone = make_sine(100.0, 1.0, sample_rate)
        data = generate_spectrum_data(tone, sample_rate)
        assert data.peak_frequency() == pytest.approx(100, rel=0.05)

    def test_silence_is_zero(self, sample_rate):
        data = generate_spectrum_data(np.zeros(sample_rate), sample_rate)
        assert all(m == 0.0 for m in data.magnitudes)

    def test_short_buffer(self, sample_rate):
        """Buffers shorter than the window still analyse what is there."""
        tone = make_sine(100.0, 0.02, sample_rate)
        data = generate_spectrum_data(tone, sample_rate)
        assert len(data) == 128
        assert max(data.magnitudes) > 0

    def test_empty_buffer(self, sample_rate):
        """An empty buffer yields zero magnitudes."""
        data = generate_spectrum_data(np.zeros(0), sample_rate)
        assert data.magnitudes == [0.0] * 128

    def test_magnitude_scales_linearly(self, sample_rate):
        """Doubling the amplitude doubles the magnitudes."""
        tone = make_sine(200.0, 0.5, sample_rate, 0.25)
        a = generate_spectrum_data(tone, sample_rate, num_bins=16)
        b = generate_spectrum_data(tone * 2, sample_rate, num_bins=16)
        np.testing.assert_allclose(b.magnitudes, np.array(a.magnitudes) * 2)

    def test_to_dict(self):
        data = SpectrumData([20.0, 40.0], [0.1, 0.2])
        assert data.to_dict() == {"frequencies": [20.0, 40.0], "magnitudes": [0.1, 0.2]}

    def test_empty_peak_frequency(self):
        assert SpectrumData().peak_frequency() == 0.0


class TestFftSpectrum:
    """Tests for the linear-binned FFT view."""

    def test_bins(self, sample_rate):
        tone = make_sine(1000.0, 1.0, sample_rate)
        data = generate_fft_spectrum_data(tone, sample_rate, num_bins=64, fft_size=2048)
        assert len(data) == 64
        assert data.peak_frequency() == pytest.approx(1000, abs=sample_rate / 2048 * 16)

    def test_too_many_bins(self, sample_rate):
        with pytest.raises(ValueError):
            generate_fft_spectrum_data(np.zeros(4096), sample_rate, num_bins=2048, fft_size=2048)


class TestComparison:
    """Tests for the concurrent original/processed comparison."""

    def test_structure(self, harmonic_tone, sample_rate):
        stereo = np.stack([harmonic_tone, harmonic_tone])
        result = generate_comparison_spectrum(stereo, stereo * 0.5, sample_rate)
        assert isinstance(result, ComparisonSpectrum)
        np.testing.assert_allclose(
            result.processed.magnitudes, np.array(result.original.magnitudes) * 0.5
        )

    def test_sequential_matches_threaded(self, harmonic_tone, sample_rate):
        threaded = generate_comparison_spectrum(harmonic_tone, harmonic_tone * 2, sample_rate, max_workers=2)
        sequential = generate_comparison_spectrum(harmonic_tone, harmonic_tone * 2, sample_rate, max_workers=1)
        assert threaded.to_dict() == sequential.to_dict()

    def test_to_dict(self, harmonic_tone, sample_rate):
        result = generate_comparison_spectrum(harmonic_tone, harmonic_tone, sample_rate, num_bins=8)
        d = result.to_dict()
        assert set(d) == {"original", "processed"}
        assert len(d["original"]["frequencies"]) == 8
