"""
Tests for the environment-driven processing configuration.
"""

import pytest

from epicenter_dsp.config import ProcessingConfig, ProcessingStep, STEP_PROGRESS


class TestProcessingConfig:
    """Tests for defaults and from_env."""

    def test_defaults(self):
        config = ProcessingConfig()
        assert config.strategy == "zero_crossing"
        assert config.spectrum_bins == 128
        assert config.spectrum_window == 4096
        assert config.spectrum_stride == 4
        assert config.max_duration_seconds == 900.0
        assert config.output_suffix == "_epicenter"
        assert config.verbose is False
        assert config.log_file is None

    def test_from_env_defaults(self, monkeypatch):
        for name in ("STRATEGY", "SPECTRUM_BINS", "SPECTRUM_WINDOW", "SPECTRUM_STRIDE", "MAX_DURATION",
                     "MAX_WORKERS", "OUTPUT_SUFFIX", "VERBOSE", "LOG_FILE"):
            monkeypatch.delenv(f"EPICENTER_{name}", raising=False)
        assert ProcessingConfig.from_env() == ProcessingConfig()

    def test_from_env_overrides(self, monkeypatch):
        monkeypatch.setenv("EPICENTER_STRATEGY", "spectral")
        monkeypatch.setenv("EPICENTER_SPECTRUM_BINS", "64")
        monkeypatch.setenv("EPICENTER_MAX_DURATION", "30")
        monkeypatch.setenv("EPICENTER_MAX_WORKERS", "1")
        monkeypatch.setenv("EPICENTER_OUTPUT_SUFFIX", "_restored")
        monkeypatch.setenv("EPICENTER_VERBOSE", "yes")
        monkeypatch.setenv("EPICENTER_LOG_FILE", "/tmp/epicenter.log")

        config = ProcessingConfig.from_env()
        assert config.strategy == "spectral"
        assert config.spectrum_bins == 64
        assert config.max_duration_seconds == 30.0
        assert config.max_workers == 1
        assert config.output_suffix == "_restored"
        assert config.verbose is True
        assert config.log_file == "/tmp/epicenter.log"

    @pytest.mark.parametrize("value", ["", "0", "false", "no"])
    def test_verbose_false_values(self, monkeypatch, value):
        monkeypatch.setenv("EPICENTER_VERBOSE", value)
        assert ProcessingConfig.from_env().verbose is False


class TestProcessingStep:
    """Tests for checkpoint identifiers."""

    def test_progress_monotonic(self):
        order = [
            ProcessingStep.VALIDATING,
            ProcessingStep.DOWNMIXING,
            ProcessingStep.SYNTHESIZING_BASS,
            ProcessingStep.PROCESSING_VOICE,
            ProcessingStep.MIXING,
            ProcessingStep.COMPLETE,
        ]
        percents = [STEP_PROGRESS[s] for s in order]
        assert percents == sorted(percents)
        assert percents[0] == 0.0
        assert percents[-1] == 100.0
