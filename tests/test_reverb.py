"""
Unit tests for the comb reverb.

Tests delay line lengths, per-sample semantics, block/sample equivalence,
dry/wet mixing and intensity handling.
"""

import pytest
import numpy as np

from epicenter_dsp.reverb import (
    COMB_DELAYS_MS,
    CombLine,
    CombReverb,
    ReverbConfig,
    apply_reverb,
)


class TestCombLine:
    """Tests for a single feedback delay line."""

    def test_lengths_at_44100(self):
        """Delays round to the nearest sample."""
        lengths = [len(CombLine.from_ms(ms, 44100, 0.5)) for ms in COMB_DELAYS_MS]
        assert lengths == [1310, 1636, 1813, 1927]

    def test_minimum_one_sample(self):
        """Very short delays at low sample rates still get one slot."""
        assert len(CombLine.from_ms(0.01, 8000, 0.5)) == 1

    def test_zero_delay_rejected(self):
        with pytest.raises(ValueError):
            CombLine(0, 0.5)

    def test_impulse_response(self):
        """An impulse re-emerges every D samples, scaled by the feedback."""
        line = CombLine(4, 0.5)
        impulse = np.zeros(14)
        impulse[0] = 1.0
        out = np.array([line.process_sample(x) for x in impulse])
        expected = np.zeros(14)
        expected[4] = 1.0
        expected[8] = 0.5
        expected[12] = 0.25
        np.testing.assert_allclose(out, expected)

    def test_block_matches_per_sample(self, rng):
        """Vectorized processing is identical to the per-sample recursion."""
        audio = rng.standard_normal(5000)
        stepper = CombLine(37, 0.6)
        expected = np.array([stepper.process_sample(x) for x in audio])

        block = CombLine(37, 0.6)
        np.testing.assert_allclose(block.process_block(audio), expected, rtol=1e-12, atol=1e-12)
        np.testing.assert_allclose(block.buffer, stepper.buffer, rtol=1e-12, atol=1e-12)
        assert block.index == stepper.index

    def test_block_state_carries_over(self, rng):
        """Blocks shorter and longer than the delay chain seamlessly."""
        audio = rng.standard_normal(900)
        whole = CombLine(50, 0.4).process_block(audio)
        line = CombLine(50, 0.4)
        pieces = [line.process_block(audio[i:i + size])
                  for i, size in [(0, 7), (7, 120), (127, 50), (177, 723)]]
        np.testing.assert_allclose(np.concatenate(pieces), whole, rtol=1e-12, atol=1e-12)

    def test_empty_block(self):
        line = CombLine(10, 0.5)
        assert len(line.process_block(np.zeros(0))) == 0
        assert line.index == 0


class TestCombReverb:
    """Tests for the four-line reverb unit."""

    def test_config_mix_and_feedback(self):
        """mix = intensity/100; feedback = 0.7 * mix."""
        config = ReverbConfig(intensity=40)
        assert config.mix == pytest.approx(0.4)
        assert config.feedback == pytest.approx(0.28)

    def test_four_lines(self):
        reverb = CombReverb(44100, 30)
        assert len(reverb.lines) == 4
        assert all(line.feedback == pytest.approx(0.21) for line in reverb.lines)

    def test_zero_intensity_is_dry(self, rng):
        """intensity 0 returns the dry signal unchanged."""
        audio = rng.standard_normal(3000)
        np.testing.assert_allclose(apply_reverb(audio, 44100, 0), audio)

    def test_dry_path_before_first_echo(self, rng):
        """Until the shortest delay elapses only the attenuated dry signal is heard."""
        audio = rng.standard_normal(3000)
        out = apply_reverb(audio, 44100, 60)
        np.testing.assert_allclose(out[:1310], audio[:1310] * (1 - 0.6 * 0.5))

    def test_first_echo_level(self):
        """The shortest line's echo arrives at mix/4 of the impulse."""
        impulse = np.zeros(2000)
        impulse[0] = 1.0
        out = apply_reverb(impulse, 44100, 80)
        assert out[1310] == pytest.approx(0.8 / 4)

    def test_tail_extends_energy(self, sample_rate):
        """Reverb adds energy after a burst ends."""
        burst = np.zeros(sample_rate)
        burst[:2000] = np.sin(np.linspace(0, 200 * np.pi, 2000))
        out = apply_reverb(burst, sample_rate, 50)
        assert np.sum(out[2000:] ** 2) > 0.01

    def test_silence(self):
        assert np.all(apply_reverb(np.zeros(5000), 44100, 100) == 0.0)

    def test_does_not_mutate_input(self, rng):
        audio = rng.standard_normal(2000)
        original = audio.copy()
        CombReverb(44100, 50).process(audio)
        np.testing.assert_array_equal(audio, original)
