# src/stft/windows.py
from functools import lru_cache

import numpy as np


@lru_cache(maxsize=16)
def hann_window(size: int) -> np.ndarray:
    """
    Periodic Hann window, w[i] = 0.5 * (1 - cos(2*pi*i / size)).

    Args:
        size (int): Window length.

    Returns:
        np.ndarray: Read-only window coefficients in [0, 1].

    Raises:
        ValueError: If size is not positive.
    """
    if size < 1:
        raise ValueError(f"Window size must be positive, got {size}")
    i = np.arange(size)
    window = 0.5 * (1.0 - np.cos(2.0 * np.pi * i / size))
    window.flags.writeable = False
    return window
