# src/audioio/audio_io.py
import struct
from dataclasses import dataclass
from typing import Optional

import numpy as np
import soundfile as sf

PCM_SCALE = 32767


@dataclass(frozen=True, eq=False)
class Signal:
    """Single-channel sample buffer at a fixed sample rate."""

    samples: np.ndarray
    sample_rate: int

    def __post_init__(self):
        samples = np.asarray(self.samples, dtype=np.float64)
        if samples.ndim != 1:
            raise ValueError("Signal samples must be 1-D (mono)")
        if self.sample_rate <= 0:
            raise ValueError(f"Sample rate must be positive, got {self.sample_rate}")
        samples = samples.view()
        samples.flags.writeable = False
        object.__setattr__(self, "samples", samples)

    def __len__(self) -> int:
        return self.samples.shape[0]

    @property
    def duration(self) -> float:
        return len(self) / self.sample_rate


def load_audio(path: str, sr: Optional[int] = None) -> Signal:
    """
    Read an audio file, convert to mono, and resample to the target rate.
    Args:
        path (str): File path to audio file.
        sr (int, optional): Target sample rate; the file's rate if None.
    Returns:
        Signal: Mono signal.
    Raises:
        RuntimeError: If the file is missing or cannot be decoded.
    """
    audio, file_sr = sf.read(path, dtype="float64")
    if audio.ndim > 1:
        audio = np.mean(audio, axis=1)
    if sr is not None and file_sr != sr:
        import librosa
        audio = librosa.resample(audio, orig_sr=file_sr, target_sr=sr)
        file_sr = sr
    return Signal(audio, int(file_sr))


def normalize_peak(audio: np.ndarray, peak: float = 0.95) -> np.ndarray:
    """
    Scale so the largest absolute sample equals `peak`.
    Args:
        audio (np.ndarray): Input audio signal.
        peak (float): Target peak amplitude.
    Returns:
        np.ndarray: Scaled copy; all-zero input is returned unscaled.
    """
    audio = np.asarray(audio, dtype=np.float64)
    max_val = np.max(np.abs(audio)) if audio.size else 0.0
    if max_val > 0:
        return audio * (peak / max_val)
    return audio.copy()


def encode_wav(signal: Signal) -> bytes:
    """
    Encode a signal as a 16-bit PCM mono WAV with the canonical 44-byte header.
    Samples are clamped to [-1, 1], scaled by 32767 and truncated toward zero.
    """
    num_channels = 1
    data_size = len(signal) * num_channels * 2
    header = b"".join([
        b"RIFF",
        struct.pack("<I", 36 + data_size),
        b"WAVE",
        b"fmt ",
        struct.pack(
            "<IHHIIHH",
            16,                                        # fmt chunk size
            1,                                         # PCM
            num_channels,
            signal.sample_rate,
            signal.sample_rate * num_channels * 2,     # byte rate
            num_channels * 2,                          # block align
            16,                                        # bits per sample
        ),
        b"data",
        struct.pack("<I", data_size),
    ])
    pcm = np.trunc(np.clip(signal.samples, -1.0, 1.0) * PCM_SCALE).astype("<i2")
    return header + pcm.tobytes()


def save_wav(signal: Signal, out_path: str) -> None:
    """
    Export a signal as WAV.
    Args:
        signal (Signal): Signal to write.
        out_path (str): Output file path.
    Raises:
        OSError: If file cannot be written.
    """
    with open(out_path, "wb") as f:
        f.write(encode_wav(signal))
