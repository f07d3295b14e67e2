import numpy as np
import pytest
from stft.stft_transform import Spectrum, analyze
from utils.metrics import (
    bin_frequencies, compute_snr, dominant_frequency, peak_amplitude, spectrogram_db,
)


def test_bin_frequencies():
    freqs = bin_frequencies(1024, 44100)
    assert freqs[0] == 0
    assert freqs[1] == pytest.approx(44100 / 2048)


def test_dominant_frequency():
    mag = np.zeros(512)
    mag[40] = 1.0
    assert dominant_frequency(Spectrum(mag, np.zeros(512)), 8000) == pytest.approx(40 * 8000 / 1024)


def test_peak_amplitude():
    assert peak_amplitude(np.array([0.2, -0.7, 0.1])) == pytest.approx(0.7)
    assert peak_amplitude(np.array([])) == 0.0


def test_compute_snr():
    x = np.sin(np.linspace(0, 20, 1000))
    assert compute_snr(x, x) == 120.0
    assert compute_snr(x, x + 0.01 * x) == pytest.approx(40.0, abs=0.01)


def test_spectrogram_db_range():
    sr = 8000
    t = np.arange(sr) / sr
    frames = analyze(np.sin(2 * np.pi * 500 * t), 512, 50)
    db = spectrogram_db(frames, sr)
    assert db.shape == (len(frames), 256)
    assert db.max() == pytest.approx(0.0)
    assert db.min() >= -80.0


def test_spectrogram_db_limits_bins_and_handles_zero():
    frames = [Spectrum(np.zeros(1024), np.zeros(1024))]
    db = spectrogram_db(frames, 44100, max_freq=16000)
    # ceil(16000 / 21.53...) bins are kept
    assert db.shape == (1, 744)
    assert np.all(db == -80.0)


def test_spectrogram_db_empty():
    assert spectrogram_db([], 8000).shape == (0, 0)
