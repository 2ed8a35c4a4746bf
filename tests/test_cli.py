"""
Tests for the command line front end and the spectrum viewer.
"""

import json

import pytest
import numpy as np
import soundfile as sf

import main as cli
from spectrum_viewer import plot_comparison
from epicenter_dsp.spectrum import ComparisonSpectrum, SpectrumData
from epicenter_dsp.utils import OUTPUT_CEILING


@pytest.fixture
def input_wav(tmp_path, harmonic_tone, sample_rate):
    """Short stereo WAV on disk."""
    path = tmp_path / "song.wav"
    sf.write(str(path), np.stack([harmonic_tone, harmonic_tone * 0.7], axis=1), sample_rate)
    return path


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep EPICENTER_* settings from the host out of CLI runs."""
    for name in ("STRATEGY", "MAX_DURATION", "OUTPUT_SUFFIX", "VERBOSE", "LOG_FILE"):
        monkeypatch.delenv(f"EPICENTER_{name}", raising=False)


class TestResolveParams:
    """Tests for parameter precedence."""

    def parse(self, *argv):
        return cli.build_parser().parse_args(["in.wav", *argv])

    def test_defaults(self):
        params = cli.resolve_params(self.parse())
        assert params.sweep_freq == 45
        assert params.reverb_enabled is False

    def test_preset(self):
        params = cli.resolve_params(self.parse("--preset", "regional"))
        assert (params.sweep_freq, params.width, params.intensity) == (42, 70, 80)

    def test_flags_override_preset(self):
        params = cli.resolve_params(self.parse("--preset", "regional", "--intensity", "10"))
        assert params.intensity == 10
        assert params.sweep_freq == 42

    def test_params_file_between_preset_and_flags(self, tmp_path):
        settings = tmp_path / "settings.yaml"
        settings.write_text("intensity: 33\nwidth: 12\n", encoding="utf-8")
        params = cli.resolve_params(self.parse(
            "--preset", "rock", "--params-file", str(settings), "--width", "90"
        ))
        assert params.sweep_freq == 47   # preset
        assert params.intensity == 33    # file
        assert params.width == 90        # flag

    def test_flags_override_camel_case_params_file(self, tmp_path):
        """camelCase file keys sit below explicit flags like snake_case ones."""
        settings = tmp_path / "settings.yaml"
        settings.write_text("sweepFreq: 50\nreverbIntensity: 20\n", encoding="utf-8")
        params = cli.resolve_params(self.parse(
            "--preset", "pop", "--params-file", str(settings),
            "--sweep-freq", "30", "--reverb-intensity", "80",
        ))
        assert params.sweep_freq == 30
        assert params.reverb_intensity == 80

    def test_reverb_flag(self):
        params = cli.resolve_params(self.parse("--reverb", "--reverb-intensity", "60"))
        assert params.reverb_enabled is True
        assert params.reverb_intensity == 60

    def test_unknown_preset(self):
        with pytest.raises(ValueError):
            cli.resolve_params(self.parse("--preset", "polka"))

    def test_default_output_path(self, tmp_path):
        path = cli.default_output_path(tmp_path / "song.flac", "_epicenter")
        assert path == tmp_path / "song_epicenter.wav"


class TestMain:
    """End-to-end CLI runs."""

    def test_writes_output_of_same_shape(self, input_wav, tmp_path):
        out = tmp_path / "out.wav"
        code = cli.main([str(input_wav), "-o", str(out), "--preset", "pop", "--no-banner"])
        assert code == 0
        audio, sr = sf.read(str(out), always_2d=True)
        original, original_sr = sf.read(str(input_wav), always_2d=True)
        assert audio.shape == original.shape
        assert sr == original_sr
        assert np.max(np.abs(audio)) <= OUTPUT_CEILING + 1e-3

    def test_default_output_name(self, input_wav):
        assert cli.main([str(input_wav), "--no-banner"]) == 0
        assert (input_wav.parent / "song_epicenter.wav").exists()

    def test_json_output(self, input_wav, tmp_path, capsys):
        out = tmp_path / "json.wav"
        assert cli.main([str(input_wav), "-o", str(out), "--json", "--strategy", "spectral"]) == 0
        payload = json.loads(capsys.readouterr().out)
        assert payload["success"] is True
        assert payload["results"]["strategy"] == "spectral"
        assert payload["results"]["output"] == str(out)

    def test_spectrum_plot(self, input_wav, tmp_path):
        plot = tmp_path / "plots" / "spectrum.png"
        code = cli.main([str(input_wav), "-o", str(tmp_path / "o.wav"),
                         "--spectrum-plot", str(plot), "--no-banner"])
        assert code == 0
        assert plot.exists()

    def test_missing_input_fails(self, tmp_path):
        assert cli.main([str(tmp_path / "missing.wav"), "--no-banner"]) == 1

    def test_unknown_strategy_fails(self, input_wav):
        assert cli.main([str(input_wav), "--strategy", "granular", "--no-banner"]) == 1

    def test_max_duration_enforced(self, input_wav, monkeypatch):
        monkeypatch.setenv("EPICENTER_MAX_DURATION", "0.5")
        assert cli.main([str(input_wav), "--no-banner"]) == 1

    def test_list_presets(self, capsys):
        assert cli.main(["--list-presets"]) == 0
        out = capsys.readouterr().out
        for name in ("regional", "rock", "pop", "classical", "custom"):
            assert name in out

    def test_input_required(self):
        with pytest.raises(SystemExit):
            cli.main([])

    def test_log_file(self, input_wav, tmp_path):
        log_file = tmp_path / "run.log"
        cli.main([str(input_wav), "-o", str(tmp_path / "o.wav"), "--log-file", str(log_file), "--no-banner"])
        assert log_file.exists()
        assert "Processed" in log_file.read_text(encoding="utf-8")


class TestSpectrumViewer:
    """Tests for plot_comparison."""

    def test_plot_written(self, tmp_path):
        freqs = [20.0, 50.0, 100.0, 1000.0]
        spectrum = ComparisonSpectrum(
            original=SpectrumData(freqs, [0.0, 0.1, 0.2, 0.05]),
            processed=SpectrumData(freqs, [0.3, 0.4, 0.2, 0.05]),
        )
        path = plot_comparison(spectrum, tmp_path / "cmp.png", sweep_freq=45)
        assert path.exists()
        assert path.stat().st_size > 0
