#!/usr/bin/env python3
"""
Epicenter DSP - CLI Entry Point

Restore the low end of bass-deficient recordings and optionally add a
comb reverb to the voice band.

Usage:
    python main.py song.wav
    python main.py song.wav --preset regional -o restored.wav
    python main.py song.wav --sweep-freq 40 --intensity 80 --reverb
    python main.py song.wav --params-file my_settings.yaml --spectrum-plot spectrum.png

Features:
    - Subharmonic bass synthesis from the surviving harmonics
    - Genre presets and YAML/JSON parameter files
    - Comb reverb on the voice band
    - Peak-limited output with the input's channel layout
"""

import argparse
import logging
import sys
import json
from pathlib import Path
from typing import Any, Dict, List, Optional

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent))

from colorama import init, Fore, Style

from epicenter_dsp import (
    AudioIOError,
    ConfigLoadError,
    ConfigLoader,
    EpicenterProcessor,
    FilterDesignError,
    ProcessingConfig,
    StrategyRegistry,
    get_preset,
    list_presets,
    read_audio,
    validate_params,
    write_audio,
)
from epicenter_dsp.presets import DEFAULT_PRESET

init()

logger = logging.getLogger("epicenter")


def print_banner():
    """Print application banner."""
    banner = """
╔════════════════════════════════════════════════════════════════╗
║                    EPICENTER BASS RESTORATION                  ║
║                                                                ║
║      Harmonics -> Subharmonics -> Balanced, Limited Mix        ║
╚════════════════════════════════════════════════════════════════╝
    """
    print(f"{Fore.CYAN}{banner}{Style.RESET_ALL}")


def print_step(step: str, message: str):
    """Print a step indicator."""
    print(f"{Fore.GREEN}[{step}]{Style.RESET_ALL} {message}")


def print_info(message: str):
    """Print info message."""
    print(f"{Fore.CYAN}ℹ{Style.RESET_ALL}  {message}")


def print_warning(message: str):
    """Print warning message."""
    print(f"{Fore.YELLOW}⚠{Style.RESET_ALL}  {message}")


def print_error(message: str):
    """Print error message."""
    print(f"{Fore.RED}✗{Style.RESET_ALL}  {message}")


def print_success(message: str):
    """Print success message."""
    print(f"{Fore.GREEN}✓{Style.RESET_ALL}  {message}")


def print_presets():
    """Print the genre preset catalogue."""
    print(f"\n{Fore.MAGENTA}{'─' * 50}{Style.RESET_ALL}")
    print(f"{Fore.MAGENTA}Genre Presets:{Style.RESET_ALL}")
    for preset in list_presets():
        p = preset.params
        print(
            f"   {preset.name:<10} sweep {p.sweep_freq:>4.0f} Hz  "
            f"width {p.width:>3.0f}%  intensity {p.intensity:>3.0f}%  "
            f"{preset.description}"
        )
    print(f"{Fore.MAGENTA}{'─' * 50}{Style.RESET_ALL}\n")


def setup_logging(verbose: bool = False, log_file: Optional[str] = None):
    """Configure root logging for the CLI."""
    handlers: List[logging.Handler] = [logging.StreamHandler()]
    if log_file:
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        handlers=handlers,
        force=True,
    )


def collect_flag_overrides(args: argparse.Namespace) -> Dict[str, Any]:
    """Parameter values given explicitly on the command line."""
    overrides = {
        "sweep_freq": args.sweep_freq,
        "width": args.width,
        "intensity": args.intensity,
        "balance": args.balance,
        "volume": args.volume,
        "reverb_intensity": args.reverb_intensity,
    }
    overrides = {k: v for k, v in overrides.items() if v is not None}
    if args.reverb is not None:
        overrides["reverb_enabled"] = args.reverb
    return overrides


def resolve_params(args: argparse.Namespace, loader: Optional[ConfigLoader] = None):
    """
    Merge parameter sources: preset < params file < explicit flags.

    Raises:
        ValueError: Unknown preset name
        ConfigLoadError: Unreadable parameter file
    """
    merged: Dict[str, Any] = get_preset(args.preset or DEFAULT_PRESET).params.to_dict()

    if args.params_file:
        loader = loader or ConfigLoader()
        merged.update(loader.load_raw(args.params_file))

    merged.update(collect_flag_overrides(args))
    return validate_params(merged)


def default_output_path(input_path: Path, suffix: str) -> Path:
    """<stem><suffix>.wav beside the input."""
    return input_path.with_name(f"{input_path.stem}{suffix}.wav")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Restore missing bass and add vocal reverb to audio files",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s song.wav
  %(prog)s song.wav --preset rock -o song_rock.wav
  %(prog)s song.wav --sweep-freq 38 --width 70 --intensity 90 --balance 60
  %(prog)s song.wav --reverb --reverb-intensity 45
  %(prog)s song.wav --params-file settings.yaml --spectrum-plot spectrum.png

Presets:
  regional, rock, pop, classical, custom (use --list-presets for details)

Parameter precedence:
  preset < --params-file < explicit flags

Environment:
  EPICENTER_STRATEGY, EPICENTER_MAX_DURATION, EPICENTER_OUTPUT_SUFFIX, ...
        """,
    )

    # Positional arguments
    parser.add_argument(
        "input",
        type=str,
        nargs="?",
        help="Input audio file (WAV, FLAC, AIFF)",
    )

    # Output options
    parser.add_argument(
        "-o", "--output",
        type=str,
        help="Output file (default: <input>_epicenter.wav)",
    )

    # Parameter sources
    parser.add_argument(
        "-p", "--preset",
        type=str,
        help="Genre preset (regional, rock, pop, classical, custom)",
    )
    parser.add_argument(
        "--params-file",
        type=str,
        help="YAML or JSON parameter file",
    )

    # Tone parameters
    parser.add_argument("--sweep-freq", type=float, help="Restoration center in Hz (27-63)")
    parser.add_argument("--width", type=float, help="Bandwidth / blend shape in %% (0-100)")
    parser.add_argument("--intensity", type=float, help="Bass amount in %% (0-100)")
    parser.add_argument("--balance", type=float, help="0 = voice, 100 = bass (0-100)")
    parser.add_argument("--volume", type=float, help="Output volume in %% (0-150)")
    parser.add_argument(
        "--reverb",
        action="store_true",
        default=None,
        help="Enable comb reverb on the voice band",
    )
    parser.add_argument("--reverb-intensity", type=float, help="Reverb amount in %% (0-100)")

    # Processing options
    parser.add_argument(
        "--strategy",
        type=str,
        help="Bass synthesis strategy (zero_crossing, spectral)",
    )
    parser.add_argument(
        "--spectrum-plot",
        type=str,
        help="Save an original-vs-processed spectrum PNG",
    )

    # Misc options
    parser.add_argument(
        "--list-presets",
        action="store_true",
        help="List genre presets and exit",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose output",
    )
    parser.add_argument(
        "--log-file",
        type=str,
        help="Also write log output to this file",
    )
    parser.add_argument(
        "--no-banner",
        action="store_true",
        help="Suppress banner output",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Output results as JSON (suppresses other output)",
    )
    return parser


def run(args: argparse.Namespace, config: ProcessingConfig) -> Dict[str, Any]:
    """Load, process and write one file. Returns a result summary."""
    input_path = Path(args.input)
    output_path = Path(args.output) if args.output else default_output_path(
        input_path, config.output_suffix
    )

    params = resolve_params(args)
    strategy_name = args.strategy or config.strategy
    if strategy_name.lower() not in StrategyRegistry.available():
        raise ValueError(
            f"Unknown strategy '{strategy_name}'. "
            f"Available: {', '.join(StrategyRegistry.available())}"
        )

    if not args.json:
        print_step("1/3", f"Reading {input_path.name}")
    buffer = read_audio(input_path)

    if config.max_duration_seconds > 0 and buffer.duration_seconds > config.max_duration_seconds:
        raise ValueError(
            f"Input is {buffer.duration_seconds:.1f}s long; "
            f"the limit is {config.max_duration_seconds:.0f}s"
        )

    if not args.json:
        print_step("2/3", f"Restoring bass ({strategy_name}, sweep {params.sweep_freq:.0f} Hz)")
    processor = EpicenterProcessor(config=config, strategy=strategy_name)

    def on_progress(step: str, percent: float):
        logger.debug(f"{percent:5.1f}% {step}")

    result = processor.process_with_spectrum(buffer, params, progress_callback=on_progress)

    if not args.json:
        print_step("3/3", f"Writing {output_path.name}")
    write_audio(output_path, result.processed)

    plot_path = None
    if args.spectrum_plot:
        from spectrum_viewer import plot_comparison
        plot_path = plot_comparison(
            result.spectrum,
            args.spectrum_plot,
            title=f"{input_path.name} -> {output_path.name}",
            sweep_freq=params.sweep_freq,
        )

    return {
        "input": str(input_path),
        "output": str(output_path),
        "spectrum_plot": str(plot_path) if plot_path else None,
        "params": params.to_dict(),
        "strategy": result.strategy,
        "duration_seconds": buffer.duration_seconds,
        "limiter": result.limiter_report,
        "elapsed_seconds": result.elapsed_seconds,
    }


def main(argv=None) -> int:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    config = ProcessingConfig.from_env()
    verbose = args.verbose or config.verbose
    setup_logging(verbose, args.log_file or config.log_file)

    if args.list_presets:
        print_presets()
        return 0

    if not args.input:
        parser.error("an input file is required (or use --list-presets)")

    if not args.no_banner and not args.json:
        print_banner()
    if not args.json:
        print_info(f"Input: {Path(args.input).absolute()}")
        if args.preset:
            print_info(f"Preset: {args.preset}")
        print()

    try:
        results = run(args, config)
    except KeyboardInterrupt:
        if not args.json:
            print_warning("\nProcessing cancelled by user")
        return 130
    except (AudioIOError, ConfigLoadError, FilterDesignError, ValueError) as e:
        if args.json:
            print(json.dumps({"success": False, "error": str(e)}, indent=2))
        else:
            print_error(f"Processing failed: {e}")
            if verbose:
                logger.exception("Processing failed")
        return 1

    if args.json:
        print(json.dumps({"success": True, "results": results}, indent=2))
    else:
        limiter = results["limiter"]
        print(f"\n{Fore.GREEN}{'═' * 50}{Style.RESET_ALL}")
        print_success("Restoration Complete!")
        print(f"{Fore.GREEN}{'═' * 50}{Style.RESET_ALL}")
        print(f"  Output:   {results['output']}")
        print(f"  Strategy: {results['strategy']}")
        print(f"  Peak:     {limiter['output_peak']:.3f}"
              + (f" (limited {limiter['gain_reduction_db']:.1f} dB)" if limiter["limited"] else ""))
        if results["spectrum_plot"]:
            print(f"  Spectrum: {results['spectrum_plot']}")
        print(f"  Time:     {results['elapsed_seconds']:.2f}s")
        print()
    return 0


if __name__ == "__main__":
    sys.exit(main())
