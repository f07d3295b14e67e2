import numpy as np
import pytest
from hybrid.operations import (
    OPERATIONS, Operation, PhaseMode, apply_operation, combine_phases,
)


@pytest.fixture
def mags():
    rng = np.random.default_rng(0)
    return rng.random(256) * 3, rng.random(256) * 3


def test_every_operation_has_an_implementation():
    assert set(OPERATIONS) == set(Operation)


def test_operator_algebra(mags):
    a, b = mags
    assert np.all(apply_operation(Operation.AND, a, b) <= apply_operation(Operation.OR, a, b))
    np.testing.assert_array_equal(apply_operation(Operation.XOR, a, b), np.abs(a - b))
    assert np.all(apply_operation(Operation.SUBTRACT, a, b) >= 0)
    np.testing.assert_array_equal(apply_operation(Operation.AVERAGE, a, b),
                                  apply_operation(Operation.AVERAGE, b, a))
    np.testing.assert_array_equal(apply_operation(Operation.MULTIPLY, a, b),
                                  apply_operation(Operation.MULTIPLY, b, a))


def test_elementwise_formulas():
    a = np.array([1.0, 4.0, 0.0, 2.0])
    b = np.array([3.0, 1.0, 0.5, 2.0])
    np.testing.assert_allclose(apply_operation("and", a, b), [1.0, 1.0, 0.0, 2.0])
    np.testing.assert_allclose(apply_operation("or", a, b), [3.0, 4.0, 0.5, 2.0])
    np.testing.assert_allclose(apply_operation("multiply", a, b), [3.0, 4.0, 0.0, 4.0])
    np.testing.assert_allclose(apply_operation("average", a, b), [2.0, 2.5, 0.25, 2.0])
    np.testing.assert_allclose(apply_operation("subtract", a, b), [0.0, 3.0, 0.0, 0.0])


def test_not_operations():
    a = np.array([1.0, 4.0, 0.0, 2.0])
    b = np.array([3.0, 1.0, 0.5, 2.0])
    # max(A) - a + min(B)
    np.testing.assert_allclose(apply_operation(Operation.NOT_A, a, b), [3.5, 0.5, 4.5, 2.5])
    # max(B) - b + min(A)
    np.testing.assert_allclose(apply_operation(Operation.NOT_B, a, b), [0.0, 2.0, 2.5, 1.0])


def test_squared_operations_keep_peak():
    a = np.array([1.0, 4.0, 0.0, 2.0])
    b = np.array([3.0, 1.0, 0.5, 2.0])
    out_a = apply_operation(Operation.A_SQUARED, a, b)
    np.testing.assert_allclose(out_a, [0.25, 4.0, 0.0, 1.0])
    out_b = apply_operation(Operation.B_SQUARED, a, b)
    np.testing.assert_allclose(out_b, [3.0, 1 / 3, 0.25 / 3, 4 / 3])


def test_squared_of_silence_is_silence():
    zeros = np.zeros(8)
    np.testing.assert_array_equal(apply_operation(Operation.A_SQUARED, zeros, zeros), zeros)


def test_unknown_operation_falls_back_to_average(mags):
    a, b = mags
    with pytest.warns(UserWarning, match="Unknown operation"):
        out = apply_operation("granulate", a, b)
    np.testing.assert_array_equal(out, (a + b) / 2)


def test_parse_accepts_value_and_name():
    assert Operation.parse("notA") is Operation.NOT_A
    assert Operation.parse("nota") is Operation.NOT_A
    assert Operation.parse("A_SQUARED") is Operation.A_SQUARED
    assert Operation.parse(Operation.XOR) is Operation.XOR


def test_mismatched_lengths_rejected():
    with pytest.raises(ValueError):
        apply_operation(Operation.AND, np.ones(4), np.ones(5))


def test_phase_selection():
    pa, pb = np.array([0.1, 0.2]), np.array([1.0, -1.0])
    ma, mb = np.ones(2), np.ones(2)
    assert combine_phases(pa, pb, ma, mb, PhaseMode.A) is pa
    assert combine_phases(pa, pb, ma, mb, PhaseMode.B) is pb


def test_weighted_phase_average():
    pa = np.array([1.0, 1.0, 2.0])
    pb = np.array([0.0, -1.0, 0.0])
    ma = np.array([3.0, 1.0, 0.0])
    mb = np.array([1.0, 1.0, 0.0])
    out = combine_phases(pa, pb, ma, mb, PhaseMode.AVERAGE)
    # 3:1 weighting, equal weighting, and plain mean where both bins are empty
    np.testing.assert_allclose(out, [0.75, 0.0, 1.0])


def test_phase_average_does_not_unwrap():
    # Angles just either side of +/-pi average to ~0 rather than ~pi. Kept as-is.
    pa = np.array([np.pi - 0.01])
    pb = np.array([-np.pi + 0.01])
    out = combine_phases(pa, pb, np.ones(1), np.ones(1), PhaseMode.AVERAGE)
    assert abs(out[0]) < 1e-12


def test_phase_mode_parse():
    assert PhaseMode.parse("useB") is PhaseMode.B
    assert PhaseMode.parse("weightedAverage") is PhaseMode.AVERAGE
    assert PhaseMode.parse("average") is PhaseMode.AVERAGE
    with pytest.warns(UserWarning):
        assert PhaseMode.parse("random") is PhaseMode.A
