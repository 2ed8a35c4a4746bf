#!/usr/bin/env python3
"""
Spectrum comparison viewer for bass restoration.

Plots the log-spaced analyzer output of the original and processed audio
on one chart so the restored sub-bass region can be checked by eye.

Usage:
    python spectrum_viewer.py input.wav --preset regional -o spectrum.png
"""

import argparse
import os
import sys
from pathlib import Path
from typing import Optional, Union

import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt
import numpy as np

# Add project to path
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from epicenter_dsp import (
    ComparisonSpectrum,
    EpicenterProcessor,
    get_preset,
    read_audio,
)


def magnitude_to_db(magnitudes, floor: float = 1e-10) -> np.ndarray:
    """Convert linear magnitudes to dB."""
    return 20 * np.log10(np.maximum(np.asarray(magnitudes, dtype=np.float64), floor))


def plot_comparison(
    spectrum: ComparisonSpectrum,
    output_path: Union[str, Path],
    title: str = "Bass Restoration",
    sweep_freq: Optional[float] = None
) -> Path:
    """
    Save an original-vs-processed spectrum chart.

    Args:
        spectrum: Comparison spectrum from the processor
        output_path: PNG path (parent directories are created)
        title: Chart title
        sweep_freq: Optional restoration centre to mark with a vertical line

    Returns:
        The written path
    """
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    fig, ax = plt.subplots(figsize=(12, 6))
    fig.patch.set_facecolor('#1a1a2e')
    ax.set_facecolor('#16213e')

    ax.semilogx(
        spectrum.original.frequencies,
        magnitude_to_db(spectrum.original.magnitudes),
        color='cyan', linewidth=1.0, label='Original',
    )
    ax.semilogx(
        spectrum.processed.frequencies,
        magnitude_to_db(spectrum.processed.magnitudes),
        color='lime', linewidth=1.0, label='Processed',
    )

    if sweep_freq is not None:
        ax.axvline(x=sweep_freq, color='yellow', linestyle=':', alpha=0.6)
        ax.axvline(x=sweep_freq / 2, color='red', linestyle='--', alpha=0.3)

    ax.set_xlabel('Frequency (Hz)', color='white')
    ax.set_ylabel('Magnitude (dB)', color='white')
    ax.set_title(title, color='white', fontweight='bold')
    ax.tick_params(colors='white')
    ax.grid(True, which='both', alpha=0.3)
    ax.legend()

    fig.tight_layout()
    fig.savefig(output_path, dpi=150, facecolor=fig.get_facecolor())
    plt.close(fig)
    return output_path


def main(argv=None) -> int:
    """Process a file and save its comparison chart."""
    parser = argparse.ArgumentParser(description="Plot original vs restored spectrum")
    parser.add_argument("input", type=str, help="Input audio file")
    parser.add_argument("--preset", type=str, default="custom", help="Genre preset")
    parser.add_argument("-o", "--output", type=str, default="spectrum_comparison.png",
                        help="Output PNG path")
    args = parser.parse_args(argv)

    buffer = read_audio(args.input)
    params = get_preset(args.preset).params
    result = EpicenterProcessor().process_with_spectrum(buffer, params)

    path = plot_comparison(
        result.spectrum,
        args.output,
        title=f"{Path(args.input).name} ({args.preset})",
        sweep_freq=params.sweep_freq,
    )
    print(f"Spectrum comparison saved to: {path}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
