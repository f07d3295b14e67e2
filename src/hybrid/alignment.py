# src/hybrid/alignment.py
import math
from typing import List, Tuple


def target_frame_count(len_a: int, len_b: int, time_align: bool) -> int:
    """Output length: the rounded-up mean of both lengths when stretching, else the shorter."""
    if time_align:
        return int(math.ceil((len_a + len_b) / 2))
    return min(len_a, len_b)


def alignment_plan(len_a: int, len_b: int, time_align: bool) -> List[Tuple[int, int]]:
    """
    Source frame indices (idx_a, idx_b) for every output frame.

    With time_align each input is stretched onto the common timeline by
    nearest-frame selection, idx = min(floor(i * len / T), len - 1). Without it
    frames pair up 1:1 and the longer input is truncated.

    Raises:
        ValueError: If stretching is requested with an empty input.
    """
    if len_a < 0 or len_b < 0:
        raise ValueError("Frame counts must be non-negative")
    total = target_frame_count(len_a, len_b, time_align)
    if not time_align:
        return [(i, i) for i in range(total)]
    if total and (len_a == 0 or len_b == 0):
        raise ValueError("Cannot stretch an input that has no frames")
    return [
        (min(i * len_a // total, len_a - 1), min(i * len_b // total, len_b - 1))
        for i in range(total)
    ]
