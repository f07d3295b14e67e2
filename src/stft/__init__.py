# STFT module
from .fft_kernel import forward_transform, inverse_transform, is_power_of_two
from .windows import hann_window
from .stft_transform import (
    Spectrum, hop_size, frame_count, analyze, resynthesize,
    transform_frame, synthesize_frame, single_frame_spectrum,
)
