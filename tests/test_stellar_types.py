import pytest

from dreamstellar.stellar_types import (
    StellarComputeStatistics,
    StellarMatch,
    StellarOutputStatistics,
    compare_length,
    compare_pos,
    is_upstream,
    sort_matches,
)


def _match(id_="db", b1=0, e1=10, b2=0, e2=10, orientation=True):
    return StellarMatch(
        id=id_, orientation=orientation, begin1=b1, end1=e1, begin2=b2, end2=e2
    )


def test_compute_statistics_merge():
    a = StellarComputeStatistics(num_swift_hits=3, max_length=40, total_length=100)
    b = StellarComputeStatistics(num_swift_hits=5, max_length=25, total_length=60)
    a.merge_in(b)
    assert a.num_swift_hits == 3 + 5
    assert a.total_length == 100 + 60
    assert a.max_length == 40


def test_output_statistics_merge():
    a = StellarOutputStatistics(max_length=10, total_length=20, num_matches=2, num_disabled=1)
    b = StellarOutputStatistics(max_length=30, total_length=5, num_matches=4, num_disabled=0)
    a.merge_in(b)
    assert a == StellarOutputStatistics(
        max_length=30, total_length=20 + 5, num_matches=2 + 4, num_disabled=1
    )


def test_match_length_is_longer_row():
    match = StellarMatch(row1="ACG-T", row2="ACGT")
    assert match.length() == len("ACG-T")
    assert StellarMatch().length() == 0


def test_compare_pos_reflexive_and_antisymmetric():
    a = _match(b1=5)
    b = _match(b1=7)
    assert compare_pos(a, a) == 0
    assert compare_pos(a, b) == -1
    assert compare_pos(b, a) == 1


def test_compare_pos_id_first():
    assert compare_pos(_match("a", b1=50), _match("b", b1=0)) == -1


def test_compare_pos_reversed_coordinates_equal():
    assert compare_pos(_match(b1=0, e1=10), _match(b1=10, e1=0)) == 0


def test_compare_pos_forward_orientation_first():
    forward = _match(orientation=True)
    reverse = _match(orientation=False)
    assert compare_pos(forward, reverse) == -1
    assert compare_pos(reverse, forward) == 1


def test_compare_pos_query_positions():
    assert compare_pos(_match(b2=1), _match(b2=2)) == -1
    assert compare_pos(_match(e2=20), _match(e2=15)) == 1


def test_compare_length_longer_first_and_invalid_last():
    long = _match(b1=0, e1=100)
    short = _match(b1=0, e1=10)
    invalid = _match(StellarMatch.INVALID_ID, b1=0, e1=1000)
    assert compare_length(long, short) == -1
    assert compare_length(short, long) == 1
    assert compare_length(invalid, long) == 1
    assert compare_length(long, invalid) == -1
    assert compare_length(long, _match(b1=100, e1=0)) == 0


def test_is_upstream_disjoint():
    assert is_upstream(_match(b1=0, e1=10), _match(b1=10, e1=20), 0, 5)
    assert not is_upstream(_match(b1=10, e1=20), _match(b1=0, e1=10), 0, 5)


def test_is_upstream_overlap_depends_on_min_length():
    m1 = _match(b1=0, e1=30)
    m2 = _match(b1=20, e1=50)
    assert is_upstream(m1, m2, 0, 20)
    assert not is_upstream(m1, m2, 0, 21)


def test_is_upstream_uses_query_row():
    m1 = _match(b1=0, e1=100, b2=0, e2=10)
    m2 = _match(b1=0, e1=100, b2=10, e2=20)
    assert not is_upstream(m1, m2, 0, 5)
    assert is_upstream(m1, m2, 1, 5)


def test_sort_matches_by_position():
    matches = [_match(b1=30), _match("a", b1=50), _match(b1=10)]
    sort_matches(matches, compare_pos)
    assert [(m.id, m.begin1) for m in matches] == [("a", 50), ("db", 10), ("db", 30)]


def test_sort_matches_by_length_is_stable():
    first = _match("x", b1=0, e1=10)
    second = _match("y", b1=5, e1=15)
    longest = _match("z", b1=0, e1=40)
    invalid = _match(StellarMatch.INVALID_ID, b1=0, e1=90)
    matches = [invalid, first, second, longest]
    sort_matches(matches, compare_length)
    assert [m.id for m in matches] == ["z", "x", "y", StellarMatch.INVALID_ID]


@pytest.mark.parametrize("row", [0, 1])
def test_identical_matches_not_upstream(row):
    m = _match(b1=0, e1=50, b2=0, e2=50)
    assert not is_upstream(m, m, row, 1)