"""Local alignment matches, their orderings and search statistics."""

from __future__ import annotations

from collections.abc import Callable, MutableSequence
from dataclasses import dataclass
from functools import cmp_to_key
from typing import ClassVar

# Karlin-Altschul values for a scoring scheme with linear gap costs,
# determined empirically for BLAST.
BLAST_MATCH = 1
BLAST_MISMATCH = 2
BLAST_LAMBDA = 1.28
BLAST_K = 0.46
BLAST_ALPHA = 1.5
BLAST_BETA = -2.0


@dataclass
class StellarComputeStatistics:
    """Counts gathered while searching and verifying one database."""

    num_swift_hits: int = 0
    max_length: int = 0
    total_length: int = 0

    def merge_in(self, other: StellarComputeStatistics) -> None:
        self.num_swift_hits += other.num_swift_hits
        self.total_length += other.total_length
        self.max_length = max(self.max_length, other.max_length)


@dataclass
class StellarOutputStatistics:
    """Counts describing the matches that were written out."""

    max_length: int = 0
    total_length: int = 0
    num_matches: int = 0
    num_disabled: int = 0

    def merge_in(self, other: StellarOutputStatistics) -> None:
        self.max_length = max(self.max_length, other.max_length)
        self.total_length += other.total_length
        self.num_matches += other.num_matches
        self.num_disabled += other.num_disabled


@dataclass
class StellarMatch:
    """A local alignment between a database (row 1) and a query (row 2).

    ``row1`` and ``row2`` hold the aligned rows, gaps written as ``-``.
    """

    INVALID_ID: ClassVar[str] = "###########"

    id: str = ""
    orientation: bool = False
    begin1: int = 0
    end1: int = 0
    row1: str = ""
    begin2: int = 0
    end2: int = 0
    row2: str = ""

    def length(self) -> int:
        """Length of the longer alignment row."""
        return max(len(self.row1), len(self.row2))


def _sign(a: object, b: object) -> int:
    if a < b:  # type: ignore[operator]
        return -1
    if a > b:  # type: ignore[operator]
        return 1
    return 0


def compare_pos(a: StellarMatch, b: StellarMatch) -> int:
    """Order by id, database interval, query interval, then forward strand first."""
    keys = (
        (a.id, b.id),
        (min(a.begin1, a.end1), min(b.begin1, b.end1)),
        (max(a.begin1, a.end1), max(b.begin1, b.end1)),
        (min(a.begin2, a.end2), min(b.begin2, b.end2)),
        (max(a.begin2, a.end2), max(b.begin2, b.end2)),
    )
    for left, right in keys:
        result = _sign(left, right)
        if result:
            return result
    return _sign(b.orientation, a.orientation)


def compare_length(a: StellarMatch, b: StellarMatch) -> int:
    """Order longer database intervals first; invalid matches go last."""
    if a.id == StellarMatch.INVALID_ID:
        return 1
    if b.id == StellarMatch.INVALID_ID:
        return -1
    a_len = abs(a.end1 - a.begin1)
    b_len = abs(b.end1 - b.begin1)
    return _sign(b_len, a_len)


def is_upstream(
    match1: StellarMatch, match2: StellarMatch, row: int, min_length: int
) -> bool:
    """Whether ``match1`` lies upstream of ``match2`` in the given row.

    Overlapping matches count as upstream only if both non-overlapping
    parts are at least ``min_length`` long.
    """
    if row == 0:
        b1, e1, b2, e2 = match1.begin1, match1.end1, match2.begin1, match2.end1
    else:
        b1, e1, b2, e2 = match1.begin2, match1.end2, match2.begin2, match2.end2

    if e1 <= b2:
        return True
    return b1 < b2 and b2 - b1 >= min_length and e1 < e2 and e2 - e1 >= min_length


def sort_matches(
    matches: MutableSequence[StellarMatch],
    compare: Callable[[StellarMatch, StellarMatch], int],
) -> None:
    """Stable in-place sort of matches by a three-way comparison."""
    matches[:] = sorted(matches, key=cmp_to_key(compare))