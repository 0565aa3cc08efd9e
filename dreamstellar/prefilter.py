"""Splitting query records into patterns and finding bins that likely hold matches."""

from __future__ import annotations

from bisect import bisect_right
from collections.abc import Callable, Iterator, Sequence
from dataclasses import dataclass


def pattern_begin_positions(
    read_len: int, pattern_size: int, query_every: int
) -> Iterator[int]:
    """Begin positions of the patterns considered in a query.

    Every ``query_every``-th position is used; a last pattern is added so that
    the end of the record is covered, e.g. 150, 50, 30 gives 0, 30, 60, 90, 100.
    """
    if read_len < pattern_size:
        raise ValueError("Query is shorter than the pattern size.")
    if query_every <= 0:
        raise ValueError("query_every must be positive.")
    last_begin = 0
    for begin in range(0, read_len - pattern_size + 1, query_every):
        yield begin
        last_begin = begin
    if last_begin < read_len - pattern_size:
        yield read_len - pattern_size


@dataclass(frozen=True)
class PatternBounds:
    """Half-open interval of minimisers that belong to a pattern, and its threshold."""

    begin_position: int
    end_position: int
    threshold: int


def make_pattern_bounds(
    begin: int,
    pattern_size: int,
    window_size: int,
    window_span_begin: Sequence[int],
    threshold: Callable[[int], int] | int,
) -> PatternBounds:
    """Minimisers covering the pattern at ``begin`` and the threshold for their count.

    ``window_span_begin`` holds, for each minimiser, the start of the first
    window it is the minimiser of. ``threshold`` is either a fixed count or a
    function of the number of minimisers in the pattern.
    """
    if not window_span_begin or window_span_begin[0] != 0:
        raise ValueError("Window spans must start with position 0.")
    if window_size > pattern_size:
        raise ValueError("The window size cannot exceed the pattern size.")

    first_after = bisect_right(window_span_begin, begin)
    if first_after == len(window_span_begin):
        raise ValueError(f"No minimiser starts after position {begin}.")
    begin_position = first_after - 1

    last_window = begin + pattern_size - window_size
    end_position = bisect_right(window_span_begin, last_window)

    count = end_position - begin_position
    limit = threshold(count) if callable(threshold) else threshold
    return PatternBounds(begin_position, end_position, limit)


def find_pattern_bins(
    pattern: PatternBounds, counting_table: Sequence[Sequence[int]]
) -> set[int]:
    """Bins in which the pattern's minimisers occur at least ``threshold`` times.

    Each row of ``counting_table`` marks, per bin, whether one minimiser of the
    query is contained in it.
    """
    rows = counting_table[pattern.begin_position : pattern.end_position]
    bin_count = len(counting_table[0]) if counting_table else 0
    totals = [0] * bin_count
    for row in rows:
        for bin_id, hit in enumerate(row):
            totals[bin_id] += int(hit)
    return {bin_id for bin_id, total in enumerate(totals) if total >= pattern.threshold}