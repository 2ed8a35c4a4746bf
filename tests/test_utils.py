"""
Tests for shared helpers: downmix, peak normalization, unit conversions.
"""

import pytest
import numpy as np

from epicenter_dsp.utils import (
    db_to_linear,
    linear_to_db,
    ms_to_samples,
    normalize_peak,
    peak,
    rms,
    to_mono,
)


class TestToMono:
    """Tests for the equal-weight downmix."""

    def test_stereo_average(self):
        stereo = np.array([[1.0, 0.5], [0.0, -0.5]])
        np.testing.assert_allclose(to_mono(stereo), [0.5, 0.0])

    def test_multichannel_average(self):
        channels = np.array([[3.0], [0.0], [0.0]])
        np.testing.assert_allclose(to_mono(channels), [1.0])

    def test_mono_is_copied(self):
        mono = np.array([0.1, 0.2])
        out = to_mono(mono)
        out[0] = 9.0
        assert mono[0] == 0.1

    def test_sequence_of_arrays(self):
        np.testing.assert_allclose(to_mono([np.ones(3), np.zeros(3)]), 0.5)


class TestNormalizePeak:
    """Tests for peak normalization."""

    def test_scales_to_target(self):
        out = normalize_peak(np.array([0.1, -0.4, 0.2]), 0.8)
        assert peak(out) == pytest.approx(0.8)
        np.testing.assert_allclose(out, [0.2, -0.8, 0.4])

    def test_near_silent_untouched(self):
        quiet = np.array([0.0005, -0.0002])
        np.testing.assert_array_equal(normalize_peak(quiet, 0.9), quiet)

    def test_does_not_mutate(self):
        audio = np.array([0.5, -0.25])
        normalize_peak(audio, 1.0)
        assert audio[0] == 0.5


class TestConversions:
    """Tests for unit helpers."""

    def test_ms_to_samples_rounds(self):
        assert ms_to_samples(29.7, 44100) == 1310
        assert ms_to_samples(41.1, 44100) == 1813

    def test_ms_to_samples_minimum(self):
        assert ms_to_samples(0.0, 44100) == 1

    def test_db_round_trip(self):
        assert linear_to_db(1.0) == pytest.approx(0.0)
        assert db_to_linear(-6.0206) == pytest.approx(0.5, rel=1e-4)

    def test_peak_and_rms(self):
        audio = np.array([1.0, -1.0, 1.0, -1.0])
        assert peak(audio) == 1.0
        assert rms(audio) == pytest.approx(1.0)
        assert peak(np.zeros(0)) == 0.0
