"""Command line interface for spectral hybridization.

Usage:
    spectral-hybrid process a.wav b.wav -o out.wav --operation and --phase-mode a
    spectral-hybrid list
    spectral-hybrid inspect a.wav --spectrogram a_spec.npy
"""

import argparse
import sys
from typing import List, Optional

import numpy as np
from tqdm import tqdm

from audioio.audio_io import load_audio, save_wav
from stft.stft_transform import analyze, single_frame_spectrum
from utils.metrics import dominant_frequency, peak_amplitude, spectrogram_db
from .config import WINDOW_SIZES, ProcessingConfig, load_config
from .operations import DESCRIPTIONS, Operation, PhaseMode
from .pipeline import process

EXAMPLE_USAGE = """
Examples:
  spectral-hybrid process voice.wav pad.wav -o hybrid.wav --operation and --phase-mode a
  spectral-hybrid process a.wav b.wav -o out.wav --config settings.json --overlap 50
  spectral-hybrid process a.wav b.wav -o out.wav --operation xor --no-time-align
  spectral-hybrid inspect voice.wav --position 0.25
"""

PHASE_MODE_HELP = {
    PhaseMode.A: "use phase of A",
    PhaseMode.B: "use phase of B",
    PhaseMode.AVERAGE: "magnitude-weighted average of both phases",
}


class TqdmProgress:
    """Progress sink that drives a tqdm bar from (percent, message) updates."""

    def __init__(self, disable: bool = False):
        self.bar = tqdm(total=100, unit="%", disable=disable, file=sys.stderr)

    def __call__(self, percent: int, message: str) -> None:
        self.bar.set_description(message)
        self.bar.update(max(0, percent - self.bar.n))

    def close(self) -> None:
        self.bar.close()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="spectral-hybrid",
        description="Combine two audio files bin-by-bin in the frequency domain.",
        epilog=EXAMPLE_USAGE,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    subparsers = parser.add_subparsers(dest="command", title="commands", metavar="<command>")

    proc = subparsers.add_parser("process", help="Hybridize two audio files")
    proc.add_argument("input_a", help="Input audio A")
    proc.add_argument("input_b", help="Input audio B (resampled to A's rate)")
    proc.add_argument("-o", "--output", required=True, help="Output WAV file")
    proc.add_argument("--config", help="JSON file with processing settings")
    proc.add_argument("--operation", help="Spectral operation (see 'list')")
    proc.add_argument("--phase-mode", help="Phase source: a, b or average")
    proc.add_argument("--window-size", type=int, choices=WINDOW_SIZES, help="FFT window size")
    proc.add_argument("--overlap", type=int, help="Frame overlap in percent (0-99)")
    proc.add_argument("--no-time-align", dest="time_align", action="store_false", default=None,
                      help="Pair frames 1:1 and truncate to the shorter input")
    proc.add_argument("--workers", type=int, help="Worker threads for analysis and combination")
    proc.add_argument("--quiet", action="store_true", help="Hide the progress bar")

    subparsers.add_parser("list", help="List operations and phase modes")

    insp = subparsers.add_parser("inspect", help="Show basic spectral facts about a file")
    insp.add_argument("input", help="Input audio file")
    insp.add_argument("--window-size", type=int, default=4096, help="FFT window size")
    insp.add_argument("--position", type=float, default=0.5, help="Snapshot position, 0-1")
    insp.add_argument("--spectrogram", help="Save a dB spectrogram (.npy)")
    return parser


def resolve_config(args: argparse.Namespace) -> ProcessingConfig:
    """Config file values first, then any flags given on the command line."""
    values = load_config(args.config).to_dict() if args.config else {}
    overrides = {
        "operation": args.operation,
        "phase_mode": args.phase_mode,
        "window_size": args.window_size,
        "overlap_percent": args.overlap,
        "time_align": args.time_align,
        "max_workers": args.workers,
    }
    values.update({k: v for k, v in overrides.items() if v is not None})
    return ProcessingConfig.from_dict(values)


def handle_process(args: argparse.Namespace) -> None:
    config = resolve_config(args)
    signal_a = load_audio(args.input_a)
    signal_b = load_audio(args.input_b, sr=signal_a.sample_rate)

    sink = TqdmProgress(disable=args.quiet)
    try:
        result = process(signal_a, signal_b, config, progress=sink)
    finally:
        sink.close()
    save_wav(result.output, args.output)
    if not args.quiet:
        print(f"Frames A: {len(result.frames_a)}, B: {len(result.frames_b)}, "
              f"output: {len(result.output_frames)}")
        print(f"Wrote {args.output} ({result.output.duration:.2f}s, {result.output.sample_rate} Hz)")


def handle_list() -> None:
    print("Operations:")
    for op in Operation:
        print(f"  {op.value:<10} {DESCRIPTIONS[op]}")
    print("Phase modes:")
    for mode in PhaseMode:
        print(f"  {mode.value:<10} {PHASE_MODE_HELP[mode]}")


def handle_inspect(args: argparse.Namespace) -> None:
    signal = load_audio(args.input)
    spectrum = single_frame_spectrum(signal.samples, args.window_size, args.position)
    print(f"Duration: {signal.duration:.3f}s")
    print(f"Sample rate: {signal.sample_rate} Hz")
    print(f"Peak amplitude: {peak_amplitude(signal.samples):.4f}")
    print(f"Dominant frequency: {dominant_frequency(spectrum, signal.sample_rate):.1f} Hz")
    if args.spectrogram:
        frames = analyze(signal.samples, 2048, 50)
        np.save(args.spectrogram, spectrogram_db(frames, signal.sample_rate))
        print(f"Saved spectrogram ({len(frames)} frames) to {args.spectrogram}")


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 0

    try:
        if args.command == "process":
            handle_process(args)
        elif args.command == "list":
            handle_list()
        elif args.command == "inspect":
            handle_inspect(args)
    except (ValueError, RuntimeError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
