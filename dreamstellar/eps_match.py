"""Choice of the longest epsilon match among candidate extension ends."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

# Guards the error rate comparison against floating point rounding.
_DELTA = 0.000001


@dataclass(frozen=True)
class ExtensionEndPosition:
    """A possible end of an extended eps-core: extension length and matrix cell."""

    length: int = 0
    coord: tuple[int, int] = (0, 0)

    @property
    def row(self) -> int:
        return self.coord[0]

    @property
    def col(self) -> int:
        return self.coord[1]


def longest_eps_match(
    ends_left: Sequence[ExtensionEndPosition],
    ends_right: Sequence[ExtensionEndPosition],
    align_len: int,
    align_err: int,
    min_length: int,
    epsilon: float,
) -> tuple[int, int] | None:
    """Indices into the left and right ends giving the longest eps-match.

    The index of an end equals its number of errors. Returns None when no
    combination reaches ``min_length`` within the error rate ``epsilon``.
    """
    if not ends_left or not ends_right:
        return None

    best: tuple[int, int] | None = None
    shortest = min_length
    last_right = len(ends_right) - 1

    for left_idx in range(len(ends_left) - 1, -1, -1):
        left_len = ends_left[left_idx].length
        if left_len + align_len + ends_right[last_right].length < shortest:
            break
        for right_idx in range(last_right, -1, -1):
            total_len = left_len + align_len + ends_right[right_idx].length
            if total_len < shortest:
                break
            total_err = left_idx + align_err + right_idx
            if total_len > 0 and total_err / total_len < epsilon + _DELTA:
                best = (left_idx, right_idx)
                shortest = total_len
                break
    return best