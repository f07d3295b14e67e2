# src/hybrid/pipeline.py
"""
Runs one hybridization: analyze both inputs, align their frames, combine
magnitudes and phases frame by frame, and resynthesize a single output.
"""

import warnings
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple

from audioio.audio_io import Signal
from stft.stft_transform import Spectrum, analyze, resynthesize
from .alignment import alignment_plan
from .config import ProcessingConfig
from .operations import apply_operation, combine_phases

ProgressCallback = Callable[[int, str], None]

PROGRESS_EVERY = 50


@dataclass(eq=False)
class HybridResult:
    """Output signal plus the frame sequences that produced it."""

    output: Signal
    frames_a: List[Spectrum]
    frames_b: List[Spectrum]
    output_frames: List[Spectrum]


def combine_frames(frame_a: Spectrum, frame_b: Spectrum, config: ProcessingConfig) -> Spectrum:
    """Apply the configured operator to the magnitudes and the phase policy to the phases."""
    magnitude = apply_operation(config.operation, frame_a.magnitude, frame_b.magnitude)
    phase = combine_phases(frame_a.phase, frame_b.phase,
                           frame_a.magnitude, frame_b.magnitude, config.phase_mode)
    return Spectrum(magnitude, phase)


def _report(progress: Optional[ProgressCallback], percent: int, message: str) -> None:
    if progress is not None:
        progress(percent, message)


def _check_signal(signal: Optional[Signal], label: str) -> None:
    if signal is None:
        raise ValueError(f"Signal {label} is missing; both inputs are required")
    if not isinstance(signal, Signal):
        raise TypeError(f"Signal {label} must be a Signal, got {type(signal).__name__}")


def process(
    signal_a: Signal,
    signal_b: Signal,
    config: Optional[ProcessingConfig] = None,
    progress: Optional[ProgressCallback] = None,
) -> HybridResult:
    """
    Hybridize two signals in the spectral domain.

    Args:
        signal_a (Signal): First input; its sample rate is used for the output.
        signal_b (Signal): Second input.
        config (ProcessingConfig, optional): Settings; defaults if None.
        progress (callable, optional): Called with (percent, message) at coarse checkpoints.

    Returns:
        HybridResult: Output signal and the frame sequences of this run.

    Raises:
        ValueError: If an input is missing or shorter than one analysis window.
    """
    _check_signal(signal_a, "A")
    _check_signal(signal_b, "B")
    config = config if config is not None else ProcessingConfig()
    config.validate()
    if signal_a.sample_rate != signal_b.sample_rate:
        warnings.warn(
            f"Sample rates differ ({signal_a.sample_rate} vs {signal_b.sample_rate}); "
            f"output uses {signal_a.sample_rate} Hz"
        )

    size, overlap, workers = config.window_size, config.overlap_percent, config.max_workers
    if workers > 1:
        with ThreadPoolExecutor(max_workers=2) as pool:
            _report(progress, 10, "Analyzing audio A...")
            future_a = pool.submit(analyze, signal_a.samples, size, overlap, workers)
            _report(progress, 30, "Analyzing audio B...")
            future_b = pool.submit(analyze, signal_b.samples, size, overlap, workers)
            frames_a, frames_b = future_a.result(), future_b.result()
    else:
        _report(progress, 10, "Analyzing audio A...")
        frames_a = analyze(signal_a.samples, size, overlap)
        _report(progress, 30, "Analyzing audio B...")
        frames_b = analyze(signal_b.samples, size, overlap)

    for label, frames in (("A", frames_a), ("B", frames_b)):
        if not frames:
            raise ValueError(f"Signal {label} is shorter than the analysis window ({size} samples)")

    plan = alignment_plan(len(frames_a), len(frames_b), config.time_align)
    _report(progress, 50, "Applying spectral operations...")
    output_frames = _combine_all(frames_a, frames_b, plan, config, progress)

    _report(progress, 80, "Resynthesizing audio...")
    samples = resynthesize(output_frames, size, overlap)
    _report(progress, 100, "Complete!")

    return HybridResult(Signal(samples, signal_a.sample_rate), frames_a, frames_b, output_frames)


def _combine_all(frames_a: List[Spectrum], frames_b: List[Spectrum],
                 plan: List[Tuple[int, int]], config: ProcessingConfig,
                 progress: Optional[ProgressCallback]) -> List[Spectrum]:
    total = len(plan)

    def combine(i: int) -> Spectrum:
        idx_a, idx_b = plan[i]
        return combine_frames(frames_a[idx_a], frames_b[idx_b], config)

    pool = ThreadPoolExecutor(max_workers=config.max_workers) if config.max_workers > 1 else None
    output_frames = []
    try:
        results = pool.map(combine, range(total)) if pool else map(combine, range(total))
        for i, frame in enumerate(results):
            output_frames.append(frame)
            if i % PROGRESS_EVERY == 0:
                _report(progress, 50 + (i * 30) // total, "Processing frames...")
    finally:
        if pool is not None:
            pool.shutdown()
    return output_frames
