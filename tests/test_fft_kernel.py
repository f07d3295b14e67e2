import numpy as np
import pytest
from stft.fft_kernel import forward_transform, inverse_transform, is_power_of_two, bit_reverse_indices
from stft.windows import hann_window


@pytest.mark.parametrize("n", [1, 2, 4, 8, 64, 1024])
def test_round_trip(n):
    rng = np.random.default_rng(n)
    x = rng.standard_normal(n)
    real = x.copy()
    imag = np.zeros(n)
    forward_transform(real, imag)
    inverse_transform(real, imag)
    np.testing.assert_allclose(real, x, rtol=1e-9, atol=1e-9)
    np.testing.assert_allclose(imag, 0.0, atol=1e-9)


@pytest.mark.parametrize("n", [2, 16, 256])
def test_matches_numpy_fft(n):
    rng = np.random.default_rng(7)
    x = rng.standard_normal(n) + 1j * rng.standard_normal(n)
    real = x.real.copy()
    imag = x.imag.copy()
    forward_transform(real, imag)
    expected = np.fft.fft(x)
    np.testing.assert_allclose(real + 1j * imag, expected, atol=1e-9)


def test_single_point_is_identity():
    real = np.array([3.5])
    imag = np.array([-1.0])
    forward_transform(real, imag)
    assert real[0] == 3.5 and imag[0] == -1.0


def test_sinusoid_peak_at_its_bin():
    n, k = 128, 9
    real = np.sin(2 * np.pi * k * np.arange(n) / n)
    imag = np.zeros(n)
    forward_transform(real, imag)
    mag = np.hypot(real, imag)[:n // 2]
    assert int(np.argmax(mag)) == k
    others = np.delete(mag, k)
    assert np.all(others < 1e-9 * mag[k])


@pytest.mark.parametrize("n", [0, 3, 6, 100])
def test_rejects_non_power_of_two(n):
    with pytest.raises(ValueError):
        forward_transform(np.zeros(n), np.zeros(n))


def test_rejects_mismatched_lengths():
    with pytest.raises(ValueError):
        forward_transform(np.zeros(8), np.zeros(4))


def test_rejects_integer_buffers():
    with pytest.raises(TypeError):
        forward_transform(np.zeros(8, dtype=int), np.zeros(8, dtype=int))


def test_is_power_of_two():
    assert [n for n in range(20) if is_power_of_two(n)] == [1, 2, 4, 8, 16]


def test_bit_reverse_indices():
    assert bit_reverse_indices(8).tolist() == [0, 4, 2, 6, 1, 5, 3, 7]


def test_hann_window_shape():
    w = hann_window(16)
    assert w.shape == (16,)
    assert w[0] == 0.0
    assert w[8] == pytest.approx(1.0)
    np.testing.assert_allclose(w[1:], w[1:][::-1])
    assert np.all((w >= 0) & (w <= 1))
    assert not w.flags.writeable
