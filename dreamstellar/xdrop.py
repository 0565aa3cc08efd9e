"""Verification of SWIFT hits: scoring, band placement and X-drop splitting."""

from __future__ import annotations

import logging
import math
from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum

_log = logging.getLogger(__name__)

GAP = "-"

# Large negative scores lead to excessive seed extension.
_SCORING_LOWER_BOUND = -1000

# Score of an open end of the segment queue; it absorbs anything merged into it.
_OPEN_END = float("-inf")


class VerificationMethod(Enum):
    """How many local alignments are verified per SWIFT hit."""

    ALL_LOCAL = "allLocal"
    BEST_LOCAL = "bestLocal"

    @property
    def best_only(self) -> bool:
        """Whether verification stops after the best local alignment."""
        return self is VerificationMethod.BEST_LOCAL


@dataclass(frozen=True)
class ScoredSegment:
    """A half-open interval of alignment columns and its score."""

    begin: int
    end: int
    score: int


@dataclass(frozen=True)
class VerificationScoring:
    """Scoring scheme and limits used to verify SWIFT hits."""

    match: int
    mismatch_indel: int
    score_drop_off: int
    min_score: int


def verification_scoring(
    epsilon: float, min_length: int, x_drop: float, host_length: int
) -> VerificationScoring:
    """Scoring scheme for eps-matches of at least ``min_length`` columns.

    ``host_length`` is the length of the database sequence; the mismatch and
    indel penalty is never below its negative.
    """
    if not 0.0 <= epsilon < 1.0:
        raise ValueError("Epsilon must be between >= 0.0 and < 1.0.")
    if min_length < 0:
        raise ValueError("Minimum length must not be negative.")

    match = 1
    mismatch_indel = _SCORING_LOWER_BOUND
    if epsilon > 0:
        mismatch_indel = max(math.ceil(-1 / epsilon) + 1, -host_length)
    score_drop_off = int(x_drop) * -mismatch_indel

    errors = math.floor(epsilon * min_length)
    min_score = math.ceil((min_length - errors) / (errors + 1))
    if epsilon > 0:
        min_length1 = max(0, math.ceil((errors + 1) / epsilon))
        errors1 = math.floor(epsilon * min_length1)
        min_score = min(min_score, math.ceil((min_length1 - errors1) / (errors1 + 1)))

    return VerificationScoring(match, mismatch_indel, score_drop_off, min_score)


def band_diagonals(
    begin_h: int, end_h: int, begin_v: int, end_v: int, query_length: int, delta: int
) -> tuple[int, int] | None:
    """Lower and upper diagonal of the band for a hit, or None if it is unusable.

    ``begin_h``/``end_h`` bound the database infix, ``begin_v``/``end_v`` the
    query infix within a query of ``query_length``.
    """
    upper = 0
    lower = end_h - end_v - begin_h + begin_v
    if begin_v == 0:
        if end_v == query_length:
            return -delta, delta
        upper = lower + delta
    elif end_v == query_length:
        lower = -delta
    elif lower > upper:
        _log.warning(
            "Database infix length > query infix length. %d>%d",
            end_h - begin_h,
            end_v - begin_v,
        )
        return None
    return lower, upper


def _first_residue(row: str) -> int:
    return next((i for i, char in enumerate(row) if char != GAP), len(row))


def _last_residue_end(row: str) -> int:
    return next((i + 1 for i in range(len(row) - 1, -1, -1) if row[i] != GAP), 0)


def _negative_merge(queue: list[tuple[int, int, float]]) -> bool:
    if len(queue) < 3:
        return False
    ab, bc, cd = queue[-3:]
    if bc[2] < 0 or bc[2] >= abs(max(ab[2], cd[2])):
        return False
    queue[-3:] = [(ab[0], cd[1], ab[2] + bc[2] + cd[2])]
    return True


def _positive_merge(queue: list[tuple[int, int, float]]) -> bool:
    if len(queue) < 5:
        return False
    ab, bc, cd, de, ef = queue[-5:]
    if cd[2] >= 0 or cd[2] < max(ab[2], ef[2]):
        return False
    queue[-4:-1] = [(bc[0], de[1], bc[2] + cd[2] + de[2])]
    return True


def split_at_x_drops(
    row0: str,
    row1: str,
    match_score: int,
    mismatch_score: int,
    gap_score: int,
    score_drop_off: int,
    min_score: int,
) -> list[ScoredSegment]:
    """Split an alignment into pieces free of X-drops.

    The rows are aligned strings of equal length with gaps written as ``-``.
    Returns the column intervals of the pieces scoring at least ``min_score``
    (Zhang et al., 1999, "Post-processing long pairwise alignments").
    """
    if len(row0) != len(row1):
        raise ValueError("Alignment rows must have the same length.")

    def is_match(pos: int) -> bool:
        a, b = row0[pos], row1[pos]
        return a != GAP and b != GAP and a == b

    pos = min(_first_residue(row0), _first_residue(row1))
    ali_length = max(_last_residue_end(row0), _last_residue_end(row1))
    queue: list[tuple[int, int, float]] = [(pos, pos, _OPEN_END)]
    result: list[ScoredSegment] = []

    while pos < ali_length or len(queue) > 1:
        if not _negative_merge(queue) and not _positive_merge(queue):
            if pos < ali_length:
                begin = pos
                score = 0
                while pos < ali_length and is_match(pos):
                    score += match_score
                    pos += 1
                queue.append((begin, pos, score))

            begin = pos
            score = 0
            while pos < ali_length and not is_match(pos):
                score += gap_score if GAP in (row0[pos], row1[pos]) else mismatch_score
                pos += 1
            queue.append((begin, pos, _OPEN_END if pos == ali_length else score))

        if len(queue) == 3 and queue[2][2] < -score_drop_off:
            begin, end, score = queue[1]
            if score >= min_score:
                result.append(ScoredSegment(begin, end, int(score)))
            del queue[:2]

    return result


def verify_order(pieces: Sequence[ScoredSegment]) -> list[str]:
    """Extension direction of each piece of a split alignment."""
    if len(pieces) == 1:
        return ["both"]
    directions = ["none"] * len(pieces)
    if pieces:
        directions[0] = "right"
        directions[-1] = "left"
    return directions