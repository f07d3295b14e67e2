# src/hybrid/operations.py
"""
Bin-wise operators combining two magnitude spectra, and the phase policy
applied alongside them.
"""

import warnings
from enum import Enum
from typing import Callable, Dict

import numpy as np


class Operation(Enum):
    AND = "and"
    OR = "or"
    XOR = "xor"
    MULTIPLY = "multiply"
    AVERAGE = "average"
    NOT_A = "notA"
    NOT_B = "notB"
    A_SQUARED = "aSquared"
    B_SQUARED = "bSquared"
    SUBTRACT = "subtract"

    @classmethod
    def parse(cls, name) -> "Operation":
        """
        Look up an operation by value ("notA") or member name ("NOT_A"), ignoring case.
        Unknown names fall back to AVERAGE with a warning.
        """
        if isinstance(name, cls):
            return name
        key = str(name).strip().lower()
        for op in cls:
            if key in (op.value.lower(), op.name.lower()):
                return op
        warnings.warn(f"Unknown operation {name!r}; falling back to 'average'")
        return cls.AVERAGE


class PhaseMode(Enum):
    A = "a"
    B = "b"
    AVERAGE = "average"

    @classmethod
    def parse(cls, name) -> "PhaseMode":
        """Accepts "a"/"b"/"average" or "useA"/"useB"/"weightedAverage". Unknown modes use A."""
        if isinstance(name, cls):
            return name
        key = str(name).strip().lower()
        aliases = {"usea": cls.A, "useb": cls.B, "weightedaverage": cls.AVERAGE}
        for mode in cls:
            if key in (mode.value, mode.name.lower()):
                return mode
        if key in aliases:
            return aliases[key]
        warnings.warn(f"Unknown phase mode {name!r}; using phase from A")
        return cls.A


def _max(arr: np.ndarray) -> float:
    return float(arr.max()) if arr.size else 0.0


def _min(arr: np.ndarray) -> float:
    return float(arr.min()) if arr.size else 0.0


def op_and(a: np.ndarray, b: np.ndarray) -> np.ndarray:
    return np.minimum(a, b)


def op_or(a: np.ndarray, b: np.ndarray) -> np.ndarray:
    return np.maximum(a, b)


def op_xor(a: np.ndarray, b: np.ndarray) -> np.ndarray:
    return np.abs(a - b)


def op_multiply(a: np.ndarray, b: np.ndarray) -> np.ndarray:
    return a * b


def op_average(a: np.ndarray, b: np.ndarray) -> np.ndarray:
    return (a + b) / 2


def op_not_a(a: np.ndarray, b: np.ndarray) -> np.ndarray:
    """Invert A against its own peak, lifted to B's floor."""
    return _max(a) - a + _min(b)


def op_not_b(a: np.ndarray, b: np.ndarray) -> np.ndarray:
    return _max(b) - b + _min(a)


def _squared(x: np.ndarray) -> np.ndarray:
    peak = _max(x)
    normalized = x / (peak or 1.0)
    return normalized * normalized * peak


def op_a_squared(a: np.ndarray, b: np.ndarray) -> np.ndarray:
    """Square A relative to its peak so the result keeps A's peak level."""
    return _squared(a)


def op_b_squared(a: np.ndarray, b: np.ndarray) -> np.ndarray:
    return _squared(b)


def op_subtract(a: np.ndarray, b: np.ndarray) -> np.ndarray:
    return np.maximum(0.0, a - b)


OPERATIONS: Dict[Operation, Callable[[np.ndarray, np.ndarray], np.ndarray]] = {
    Operation.AND: op_and,
    Operation.OR: op_or,
    Operation.XOR: op_xor,
    Operation.MULTIPLY: op_multiply,
    Operation.AVERAGE: op_average,
    Operation.NOT_A: op_not_a,
    Operation.NOT_B: op_not_b,
    Operation.A_SQUARED: op_a_squared,
    Operation.B_SQUARED: op_b_squared,
    Operation.SUBTRACT: op_subtract,
}

DESCRIPTIONS: Dict[Operation, str] = {
    Operation.AND: "min(a, b): common content",
    Operation.OR: "max(a, b): union of content",
    Operation.XOR: "|a - b|: difference magnitude",
    Operation.MULTIPLY: "a * b: emphasize shared energy",
    Operation.AVERAGE: "(a + b) / 2: blend",
    Operation.NOT_A: "max(A) - a + min(B): invert A, anchored to B's floor",
    Operation.NOT_B: "max(B) - b + min(A): invert B, anchored to A's floor",
    Operation.A_SQUARED: "(a / max(A))^2 * max(A): enhance A harmonics",
    Operation.B_SQUARED: "(b / max(B))^2 * max(B): enhance B harmonics",
    Operation.SUBTRACT: "max(0, a - b): A's unique content",
}


def apply_operation(operation, mag_a: np.ndarray, mag_b: np.ndarray) -> np.ndarray:
    """
    Combine two magnitude spectra with the selected operator.

    Args:
        operation (Operation or str): Operator; strings go through Operation.parse.
        mag_a (np.ndarray): Magnitudes from A.
        mag_b (np.ndarray): Magnitudes from B, same length as mag_a.

    Returns:
        np.ndarray: New magnitude array.

    Raises:
        ValueError: If the arrays differ in length.
    """
    mag_a = np.asarray(mag_a, dtype=np.float64)
    mag_b = np.asarray(mag_b, dtype=np.float64)
    if mag_a.shape != mag_b.shape:
        raise ValueError(f"Magnitude arrays differ in shape: {mag_a.shape} vs {mag_b.shape}")
    return OPERATIONS[Operation.parse(operation)](mag_a, mag_b)


def combine_phases(phase_a: np.ndarray, phase_b: np.ndarray,
                   mag_a: np.ndarray, mag_b: np.ndarray, mode: PhaseMode) -> np.ndarray:
    """
    Pick or blend phases for one output frame.

    AVERAGE weights each bin by the relative magnitudes, falling back to the plain
    mean where both magnitudes are zero. Angles are blended as plain numbers, with
    no unwrapping across the +/-pi boundary.
    """
    mode = PhaseMode.parse(mode)
    if mode is PhaseMode.A:
        return phase_a
    if mode is PhaseMode.B:
        return phase_b
    total = mag_a + mag_b
    mean = (phase_a + phase_b) / 2
    safe_total = np.where(total > 0, total, 1.0)
    weight_a = mag_a / safe_total
    weight_b = mag_b / safe_total
    weighted = phase_a * weight_a + phase_b * weight_b
    return np.where(total > 0, weighted, mean)
