import logging

import pytest

from dreamstellar.metadata import (
    Metadata,
    SegmentStats,
    read_fasta,
    trim_fasta_id,
)

LEN_A = 1000
LEN_B = 500
LEN_C = 30
PATTERN = 20


def _write_fasta(path, records):
    with open(path, "w") as handle:
        for header, sequence in records:
            handle.write(f">{header}\n")
            for start in range(0, len(sequence), 60):
                handle.write(sequence[start:start + 60] + "\n")
    return path


@pytest.fixture
def reference(tmp_path):
    return _write_fasta(
        tmp_path / "ref.fasta",
        [
            ("chrA description text", "ACGT" * (LEN_A // 4)),
            ("chrB", "A" * LEN_B),
            ("chrC", "C" * LEN_C),
        ],
    )


def _check_coverage(meta, ind, seq_len):
    pieces = meta.segments_from_ind(ind)
    assert pieces[0].start == 0
    assert pieces[-1].start + pieces[-1].length == seq_len
    for prev, nxt in zip(pieces, pieces[1:]):
        assert nxt.start == prev.start + prev.length - PATTERN


def test_trim_fasta_id():
    assert trim_fasta_id("  chr1 some description") == "chr1"
    assert trim_fasta_id("seq\tother") == "seq"


def test_trim_fasta_id_empty():
    with pytest.raises(ValueError, match="can not be empty"):
        trim_fasta_id(" \t\r ")


def test_read_fasta_multiline(reference):
    records = list(read_fasta(reference))
    assert [header for header, _ in records] == [
        "chrA description text",
        "chrB",
        "chrC",
    ]
    assert [len(seq) for _, seq in records] == [LEN_A, LEN_B, LEN_C]


def test_read_fastq(tmp_path):
    path = tmp_path / "reads.fastq"
    path.write_text("@r1 x\nACGT\n+\nIIII\n\n@r2\nGG\n+\nII\n")
    assert list(read_fasta(path)) == [("r1 x", "ACGT"), ("r2", "GG")]


def test_read_rejects_unknown_format(tmp_path):
    path = tmp_path / "bad.txt"
    path.write_text("hello\n")
    with pytest.raises(ValueError):
        list(read_fasta(path))


def test_unique_id():
    assert SegmentStats(id=0, seq_vec=[1, 2], start=0, length=10).unique_id() == "1_2_0_10"
    assert SegmentStats(id=3, seq_vec=[4], start=100, length=50).unique_id() == "4_100_50"


def test_from_database_exact_segments(reference, caplog):
    with caplog.at_level(logging.WARNING):
        meta = Metadata.from_database(reference, 4, PATTERN, 0.01)
    assert meta.seg_count == 4
    assert meta.seq_count == 3
    assert [s.id for s in meta.sequences] == ["chrA", "chrB", "chrC"]
    assert [s.ind for s in meta.sequences] == [0, 1, 2]
    assert meta.total_len == LEN_A + LEN_B
    assert any("chrC" in record.getMessage() for record in caplog.records)
    assert all(2 not in seg.seq_vec for seg in meta.segments)
    assert [seg.id for seg in meta.segments] == list(range(meta.seg_count))
    firsts = [seg.seq_vec[0] for seg in meta.segments]
    assert firsts == sorted(firsts)
    _check_coverage(meta, 0, LEN_A)
    _check_coverage(meta, 1, LEN_B)
    assert meta.pattern_size == PATTERN
    assert meta.ibf_fpr == 0.01


def test_segments_from_ind_partition(reference):
    meta = Metadata.from_database(reference, 4, PATTERN, 0.01)
    collected = meta.segments_from_ind(0) + meta.segments_from_ind(1)
    assert collected == meta.segments
    assert meta.segments_from_ind(2) == []


def test_from_database_overlap_too_large(reference):
    with pytest.raises(ValueError, match="can not overlap"):
        Metadata.from_database(reference, 100, PATTERN, 0.01)


def test_from_database_too_few_segments(reference):
    with pytest.raises(ValueError, match="Can not split"):
        Metadata.from_database(reference, 1, PATTERN, 0.01)


def test_from_query_equal_length(reference):
    meta = Metadata.from_query(reference, PATTERN, max_segment_len=10_000, seg_count=4)
    assert meta.seg_count == len(meta.segments)
    assert meta.ibf_fpr == 0.0
    _check_coverage(meta, 0, LEN_A)
    _check_coverage(meta, 1, LEN_B)


def test_from_query_automatic_count(reference):
    meta = Metadata.from_query(reference, PATTERN, max_segment_len=10_000)
    indices = {ind for seg in meta.segments for ind in seg.seq_vec}
    assert indices <= {0, 1, 2}
    assert meta.seg_count == len(meta.segments)


def test_from_metagenome(tmp_path):
    first = _write_fasta(tmp_path / "bin_0.fasta", [("x1", "A" * 100), ("x2", "C" * 50)])
    second = _write_fasta(tmp_path / "bin_1.fasta", [("y1", "G" * 70)])
    meta = Metadata.from_metagenome([first, second], PATTERN, 0.05)
    assert [f.id for f in meta.files] == [0, 1]
    assert [f.path for f in meta.files] == [str(first), str(second)]
    assert [s.file_id for s in meta.sequences] == [0, 0, 1]
    assert [seg.seq_vec for seg in meta.segments] == [[0, 1], [2]]
    assert [seg.length for seg in meta.segments] == [100 + 50, 70]
    assert meta.total_len == 100 + 50 + 70
    assert meta.seg_count == 2


def test_ind_from_id(reference):
    meta = Metadata.from_database(reference, 4, PATTERN, 0.01)
    assert meta.ind_from_id("chrB") == 1
    with pytest.raises(ValueError, match="does not contain sequence"):
        meta.ind_from_id("missing")


def test_segment_from_bin(reference):
    meta = Metadata.from_database(reference, 4, PATTERN, 0.01)
    assert meta.segment_from_bin(0) is meta.segments[0]
    with pytest.raises(IndexError):
        meta.segment_from_bin(meta.seg_count)
    with pytest.raises(IndexError):
        meta.segments_from_ind(meta.seq_count)


def test_update_segments_for_distributed_stellar(reference):
    meta = Metadata.from_database(reference, 4, PATTERN, 0.01)
    meta.update_segments_for_distributed_stellar(2, PATTERN)
    covered = {ind for seg in meta.segments for ind in seg.seq_vec}
    assert covered == {seq.ind for seq in meta.sequences}
    assert meta.seg_count == len(meta.segments)
    assert [seg.id for seg in meta.segments] == list(range(meta.seg_count))


def test_update_segments_rejects_overlap(reference):
    meta = Metadata.from_database(reference, 4, PATTERN, 0.01)
    with pytest.raises(ValueError, match="can not overlap"):
        meta.update_segments_for_distributed_stellar(1000, PATTERN)