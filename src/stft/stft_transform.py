# src/stft/stft_transform.py
import math
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import List, Sequence

import numpy as np

from audioio.audio_io import normalize_peak
from .fft_kernel import forward_transform, inverse_transform, is_power_of_two
from .windows import hann_window

WINDOW_SUM_EPSILON = 0.001
OUTPUT_PEAK = 0.95


@dataclass(frozen=True, eq=False)
class Spectrum:
    """Non-negative-frequency half of one frame's transform, as magnitude and phase."""

    magnitude: np.ndarray
    phase: np.ndarray

    def __post_init__(self):
        magnitude = np.asarray(self.magnitude, dtype=np.float64)
        phase = np.asarray(self.phase, dtype=np.float64)
        if magnitude.shape != phase.shape or magnitude.ndim != 1:
            raise ValueError("magnitude and phase must be 1-D arrays of equal length")
        for name, arr in (("magnitude", magnitude), ("phase", phase)):
            arr = arr.view()
            arr.flags.writeable = False
            object.__setattr__(self, name, arr)

    @property
    def num_bins(self) -> int:
        return self.magnitude.shape[0]


def hop_size(window_size: int, overlap_percent: float) -> int:
    """
    Hop between consecutive frames, floor(window_size * (1 - overlap/100)).

    Raises:
        ValueError: If the overlap is outside [0, 100) or the hop would be zero.
    """
    if not 0 <= overlap_percent < 100:
        raise ValueError(f"Overlap must be in [0, 100), got {overlap_percent}")
    hop = int(math.floor(window_size * (1 - overlap_percent / 100)))
    if hop < 1:
        raise ValueError(
            f"Overlap {overlap_percent}% leaves no hop for window size {window_size}"
        )
    return hop


def _check_window_size(window_size: int) -> None:
    if not is_power_of_two(window_size) or window_size < 2:
        raise ValueError(f"Window size must be a power of two >= 2, got {window_size}")


def frame_count(num_samples: int, window_size: int, hop: int) -> int:
    """Number of complete frames; trailing samples past the last full frame are dropped."""
    if num_samples < window_size:
        return 0
    return (num_samples - window_size) // hop + 1


def transform_frame(frame: np.ndarray) -> Spectrum:
    """
    Forward-transform one already-windowed frame and keep its half-spectrum.

    Args:
        frame (np.ndarray): Time-domain frame, power-of-two length.

    Returns:
        Spectrum: First len(frame)/2 magnitude and phase values.
    """
    real = np.array(frame, dtype=np.float64)
    imag = np.zeros_like(real)
    forward_transform(real, imag)
    half = real.shape[0] // 2
    return Spectrum(np.hypot(real[:half], imag[:half]), np.arctan2(imag[:half], real[:half]))


def analyze(audio: np.ndarray, window_size: int, overlap_percent: float, max_workers: int = 1) -> List[Spectrum]:
    """
    Short-time analysis: slice, Hann-window and transform overlapping frames.

    Args:
        audio (np.ndarray): Mono signal.
        window_size (int): FFT size, a power of two.
        overlap_percent (float): Frame overlap in percent, in [0, 100).
        max_workers (int): Threads used to transform frames; 1 runs inline.

    Returns:
        List[Spectrum]: One half-spectrum per complete frame, earliest first.

    Raises:
        ValueError: If parameters are invalid.
    """
    audio = np.asarray(audio, dtype=np.float64)
    if audio.ndim != 1:
        raise ValueError("Input audio must be 1-D (mono)")
    _check_window_size(window_size)
    hop = hop_size(window_size, overlap_percent)
    window = hann_window(window_size)

    n_frames = frame_count(audio.shape[0], window_size, hop)
    frames = (audio[i * hop:i * hop + window_size] * window for i in range(n_frames))
    if max_workers > 1 and n_frames > 1:
        with ThreadPoolExecutor(max_workers=max_workers) as pool:
            return list(pool.map(transform_frame, frames))
    return [transform_frame(frame) for frame in frames]


def synthesize_frame(spectrum: Spectrum) -> np.ndarray:
    """
    Rebuild a real time-domain frame from a half-spectrum.

    The negative-frequency half is mirrored from bins 1..N/2-1; bin 0 and the
    Nyquist bin are not treated specially. The inverse result is doubled to
    make up for the single-sided reconstruction.
    """
    half = spectrum.num_bins
    size = half * 2
    real = np.zeros(size)
    imag = np.zeros(size)
    real[:half] = spectrum.magnitude * np.cos(spectrum.phase)
    imag[:half] = spectrum.magnitude * np.sin(spectrum.phase)
    real[size - 1:half:-1] = real[1:half]
    imag[size - 1:half:-1] = -imag[1:half]
    inverse_transform(real, imag)
    return real * 2


def resynthesize(frames: Sequence[Spectrum], window_size: int, overlap_percent: float) -> np.ndarray:
    """
    Inverse transform and overlap-add with window-sum normalization.

    Args:
        frames (Sequence[Spectrum]): Half-spectra of length window_size/2.
        window_size (int): FFT size used for analysis.
        overlap_percent (float): Frame overlap in percent.

    Returns:
        np.ndarray: Signal of length (len(frames)-1)*hop + window_size, peak-scaled
        to 0.95 unless silent. Empty when there are no frames.

    Raises:
        ValueError: If parameters are invalid or a frame has the wrong size.
    """
    _check_window_size(window_size)
    hop = hop_size(window_size, overlap_percent)
    if len(frames) == 0:
        return np.zeros(0)

    window = hann_window(window_size)
    output_length = (len(frames) - 1) * hop + window_size
    output = np.zeros(output_length)
    window_sum = np.zeros(output_length)

    for i, spectrum in enumerate(frames):
        if spectrum.num_bins * 2 != window_size:
            raise ValueError(
                f"Frame {i} has {spectrum.num_bins} bins, expected {window_size // 2}"
            )
        offset = i * hop
        output[offset:offset + window_size] += synthesize_frame(spectrum) * window
        window_sum[offset:offset + window_size] += window

    covered = window_sum > WINDOW_SUM_EPSILON
    output[covered] /= window_sum[covered]
    return normalize_peak(output, OUTPUT_PEAK)


def single_frame_spectrum(audio: np.ndarray, window_size: int = 4096, position: float = 0.5) -> Spectrum:
    """
    Half-spectrum of one Hann-windowed frame taken at a relative position.

    Samples past the end of the signal repeat the last sample.
    """
    audio = np.asarray(audio, dtype=np.float64)
    if audio.ndim != 1 or audio.shape[0] == 0:
        raise ValueError("Input audio must be a non-empty 1-D array")
    _check_window_size(window_size)
    start = max(0, int(math.floor((audio.shape[0] - window_size) * position)))
    idx = np.minimum(start + np.arange(window_size), audio.shape[0] - 1)
    return transform_frame(audio[idx] * hann_window(window_size))
