# src/utils/metrics.py
import math
from typing import Sequence

import numpy as np

from stft.stft_transform import Spectrum


def bin_frequencies(num_bins: int, sample_rate: int) -> np.ndarray:
    """Centre frequency in Hz of each half-spectrum bin.

    Args:
        num_bins: Bins in the half-spectrum (window size / 2)
        sample_rate: Sample rate of the analyzed signal

    Returns:
        Array of length num_bins
    """
    return np.arange(num_bins) * (sample_rate / (2 * num_bins))


def dominant_frequency(spectrum: Spectrum, sample_rate: int) -> float:
    """Frequency in Hz of the strongest bin."""
    if spectrum.num_bins == 0:
        return 0.0
    k = int(np.argmax(spectrum.magnitude))
    return float(bin_frequencies(spectrum.num_bins, sample_rate)[k])


def peak_amplitude(audio: np.ndarray) -> float:
    audio = np.asarray(audio)
    return float(np.max(np.abs(audio))) if audio.size else 0.0


def compute_snr(reference: np.ndarray, estimate: np.ndarray) -> float:
    """Compute SNR in dB of an estimate against a reference.

    Args:
        reference: Reference signal
        estimate: Reconstructed signal

    Returns:
        SNR value in dB, capped at 120 dB for near-perfect matches
    """
    if len(reference) != len(estimate):
        min_len = min(len(reference), len(estimate))
        reference = reference[:min_len]
        estimate = estimate[:min_len]

    signal_power = np.sum(np.asarray(reference) ** 2)
    noise_power = np.sum((np.asarray(reference) - np.asarray(estimate)) ** 2)

    if noise_power < 1e-12:
        return 120.0
    if signal_power == 0:
        return -100.0

    snr = 10 * np.log10(signal_power / noise_power)
    return float(max(-100.0, min(120.0, snr)))


def spectrogram_db(
    frames: Sequence[Spectrum],
    sample_rate: int,
    min_db: float = -80.0,
    max_db: float = 0.0,
    max_freq: float = 16000.0,
) -> np.ndarray:
    """Magnitudes of a frame sequence in dB relative to their global peak.

    Only bins up to max_freq are kept. Values are clamped to [min_db, max_db]
    and empty bins read as min_db.

    Args:
        frames: Frame sequence from analysis or a hybridization run
        sample_rate: Sample rate of the frames' source
        min_db: Floor of the dynamic range
        max_db: Ceiling of the dynamic range
        max_freq: Highest frequency to keep in Hz

    Returns:
        Array of shape (num_frames, displayed_bins)
    """
    if len(frames) == 0:
        return np.zeros((0, 0))
    num_bins = frames[0].num_bins
    bin_width = (sample_rate / 2) / num_bins
    display_bins = min(num_bins, int(math.ceil(max_freq / bin_width)))

    mags = np.stack([f.magnitude[:display_bins] for f in frames])
    ref_level = float(mags.max()) or 1.0

    db = np.full(mags.shape, float(min_db))
    nonzero = mags > 0
    db[nonzero] = 20 * np.log10(mags[nonzero] / ref_level)
    return np.clip(db, min_db, max_db)
