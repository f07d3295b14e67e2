# src/stft/fft_kernel.py
"""
Radix-2 decimation-in-time FFT operating in place on separate real and
imaginary buffers.
"""

import numpy as np


def is_power_of_two(n: int) -> bool:
    """Return True if n is a positive integral power of two."""
    return isinstance(n, (int, np.integer)) and n >= 1 and (n & (n - 1)) == 0


def _check_buffers(real: np.ndarray, imag: np.ndarray) -> int:
    if not isinstance(real, np.ndarray) or not isinstance(imag, np.ndarray):
        raise TypeError("real and imag must be numpy arrays")
    if real.ndim != 1 or imag.ndim != 1:
        raise ValueError("real and imag must be 1-D")
    if not (np.issubdtype(real.dtype, np.floating) and np.issubdtype(imag.dtype, np.floating)):
        raise TypeError("real and imag must have a floating point dtype")
    if not (real.flags.c_contiguous and imag.flags.c_contiguous):
        raise ValueError("real and imag must be contiguous buffers")
    n = real.shape[0]
    if imag.shape[0] != n:
        raise ValueError(f"real and imag lengths differ ({n} != {imag.shape[0]})")
    if not is_power_of_two(n):
        raise ValueError(f"Transform size must be a power of two, got {n}")
    return n


def bit_reverse_indices(n: int) -> np.ndarray:
    """Index permutation mapping i to the bit-reversal of i over log2(n) bits."""
    bits = n.bit_length() - 1
    idx = np.arange(n)
    rev = np.zeros(n, dtype=np.intp)
    for b in range(bits):
        rev |= ((idx >> b) & 1) << (bits - 1 - b)
    return rev


def _twiddles(half: int, angle: float):
    # w[j] = exp(i*angle*j), built by repeated rotation rather than one trig call per j
    step = complex(np.cos(angle), np.sin(angle))
    w = np.empty(half, dtype=np.complex128)
    w[0] = 1.0
    if half > 1:
        w[1:] = np.cumprod(np.full(half - 1, step))
    return w.real, w.imag


def forward_transform(real: np.ndarray, imag: np.ndarray) -> None:
    """
    In-place forward FFT.

    Args:
        real (np.ndarray): Real part, overwritten with the transform's real part.
        imag (np.ndarray): Imaginary part, overwritten likewise.

    Raises:
        ValueError: If the length is not a power of two or the buffers differ in length.
    """
    n = _check_buffers(real, imag)
    if n == 1:
        return

    perm = bit_reverse_indices(n)
    real[:] = real[perm]
    imag[:] = imag[perm]

    length = 2
    while length <= n:
        half = length // 2
        w_re, w_im = _twiddles(half, -2.0 * np.pi / length)
        # Each row is one block of size `length`; views write straight back into the buffers
        re = real.reshape(-1, length)
        im = imag.reshape(-1, length)
        u_re, u_im = re[:, :half], im[:, :half]
        v_re, v_im = re[:, half:], im[:, half:]
        t_re = v_re * w_re - v_im * w_im
        t_im = v_re * w_im + v_im * w_re
        re[:, half:] = u_re - t_re
        im[:, half:] = u_im - t_im
        re[:, :half] = u_re + t_re
        im[:, :half] = u_im + t_im
        length <<= 1


def inverse_transform(real: np.ndarray, imag: np.ndarray) -> None:
    """In-place inverse FFT: conjugate, forward transform, conjugate and scale by 1/N."""
    n = _check_buffers(real, imag)
    np.negative(imag, out=imag)
    forward_transform(real, imag)
    real /= n
    np.negative(imag, out=imag)
    imag /= n
