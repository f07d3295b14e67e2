# Audio I/O module
from .audio_io import Signal, load_audio, normalize_peak, encode_wav, save_wav
