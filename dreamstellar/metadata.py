"""Sequence database metadata: files, sequences and overlapping segments."""

from __future__ import annotations

import logging
import math
import struct
from collections.abc import Iterable, Iterator, Sequence
from dataclasses import dataclass, field
from os import PathLike

_log = logging.getLogger(__name__)


def _f32(value: float) -> float:
    """Round a value to single precision."""
    return struct.unpack("f", struct.pack("f", value))[0]


def _round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero (non-negative input)."""
    floor = math.floor(value)
    return floor + 1 if value - floor >= 0.5 else floor


def trim_fasta_id(fasta_id: str) -> str:
    """The first whitespace-delimited word of a sequence header."""
    tokens = fasta_id.split()
    if not tokens:
        raise ValueError("Sequence name can not be empty.")
    return tokens[0]


def _parse_fasta(header: str, lines: Iterator[str]) -> Iterator[tuple[str, str]]:
    name = header[1:]
    parts: list[str] = []
    for line in lines:
        if line.startswith(">"):
            yield name, "".join(parts)
            name = line[1:]
            parts = []
        else:
            parts.append("".join(line.split()))
    yield name, "".join(parts)


def _parse_fastq(header: str, lines: Iterator[str]) -> Iterator[tuple[str, str]]:
    while True:
        try:
            sequence = next(lines)
            separator = next(lines)
            next(lines)
        except StopIteration:
            raise ValueError(f"Truncated FASTQ record {header[1:]!r}.") from None
        if not separator.startswith("+"):
            raise ValueError(f"Malformed FASTQ record {header[1:]!r}.")
        yield header[1:], sequence.strip()
        following = next((line for line in lines if line.strip()), None)
        if following is None:
            return
        if not following.startswith("@"):
            raise ValueError(f"Malformed FASTQ header {following!r}.")
        header = following


def read_fasta(path: str | PathLike[str]) -> Iterator[tuple[str, str]]:
    """Yield ``(header, sequence)`` pairs from a FASTA or FASTQ file."""
    with open(path) as handle:
        lines = (line.rstrip("\r\n") for line in handle)
        first = next((line for line in lines if line.strip()), None)
        if first is None:
            return
        if first.startswith(">"):
            yield from _parse_fasta(first, lines)
        elif first.startswith("@"):
            yield from _parse_fastq(first, lines)
        else:
            raise ValueError(f"{path}: not a FASTA or FASTQ file.")


@dataclass
class SequenceFile:
    """An input sequence file and its numerical id."""

    id: int
    path: str


@dataclass
class SequenceStats:
    """One database sequence: file id, FASTA id, 0-based FASTA index and length."""

    file_id: int
    id: str
    ind: int
    length: int


@dataclass
class SegmentStats:
    """A segment made of one subsequence or of several whole sequences."""

    id: int
    seq_vec: list[int] = field(default_factory=list)
    start: int = 0
    length: int = 0

    def unique_id(self) -> str:
        parts = [str(ind) for ind in self.seq_vec]
        parts += [str(self.start), str(self.length)]
        return "_".join(parts)


def _fasta_order_key(segment: SegmentStats) -> int:
    if len(segment.seq_vec) > 1:
        raise ValueError("Can't order sets of sets of sequences.")
    return segment.seq_vec[0]


@dataclass
class Metadata:
    """Description of a split sequence database."""

    total_len: int = 0
    pattern_size: int = 0
    ibf_fpr: float = 0.0
    information_content: float = 1.0
    files: list[SequenceFile] = field(default_factory=list)
    sequences: list[SequenceStats] = field(default_factory=list)
    segments: list[SegmentStats] = field(default_factory=list)

    @property
    def seq_count(self) -> int:
        return len(self.sequences)

    @property
    def seg_count(self) -> int:
        return len(self.segments)

    @classmethod
    def from_database(
        cls,
        path: str | PathLike[str],
        seg_count: int,
        pattern_size: int,
        fpr: float,
        information_content: float = 1.0,
    ) -> Metadata:
        """Split a single reference file into exactly ``seg_count`` segments."""
        meta = cls(
            pattern_size=pattern_size,
            ibf_fpr=fpr,
            information_content=information_content,
        )
        meta._scan_database_file(path)
        meta._scan_database_sequences(seg_count, pattern_size, exact=True)
        return meta

    @classmethod
    def from_metagenome(
        cls,
        bin_paths: Sequence[str | PathLike[str]],
        pattern_size: int,
        fpr: float,
        information_content: float = 1.0,
    ) -> Metadata:
        """One segment per input file, holding all of that file's sequences."""
        meta = cls(
            pattern_size=pattern_size,
            ibf_fpr=fpr,
            information_content=information_content,
        )
        for file_id, bin_file in enumerate(bin_paths):
            meta.files.append(SequenceFile(file_id, str(bin_file)))
            bin_len = 0
            bin_seq_ids: list[int] = []
            for header, sequence in read_fasta(bin_file):
                seq = SequenceStats(
                    file_id, trim_fasta_id(header), len(meta.sequences), len(sequence)
                )
                meta.total_len += seq.length
                bin_len += seq.length
                bin_seq_ids.append(seq.ind)
                meta.sequences.append(seq)
            meta.segments.append(SegmentStats(len(meta.segments), bin_seq_ids, 0, bin_len))
        return meta

    @classmethod
    def from_query(
        cls,
        path: str | PathLike[str],
        pattern_size: int,
        max_segment_len: int,
        seg_count: int | None = None,
    ) -> Metadata:
        """Split a query file into segments of roughly equal length."""
        meta = cls(pattern_size=pattern_size)
        meta._scan_database_file(path)
        if seg_count is None:
            if meta.total_len > max_segment_len * 10:
                if max_segment_len <= pattern_size:
                    raise ValueError(
                        "Maximum segment length must exceed the pattern size."
                    )
                seg_count = meta.total_len // (max_segment_len - pattern_size)
            else:
                seg_count = 2 * len(meta.sequences)
        meta._scan_database_sequences(seg_count, pattern_size, exact=False)
        return meta

    def update_segments_for_distributed_stellar(
        self, seg_count: int, pattern_size: int
    ) -> None:
        """Resplit all sequences into segments of roughly equal length."""
        self.segments.clear()
        default_seg_len = self._default_segment_length(seg_count, pattern_size)
        self._split(list(self.sequences), default_seg_len, pattern_size)
        self._sort_fasta_order()

    def ind_from_id(self, string_id: str) -> int:
        """The FASTA index of the sequence with this id."""
        for seq in self.sequences:
            if seq.id == string_id:
                return seq.ind
        raise ValueError(
            f"Sequence metadata does not contain sequence {string_id} from Stellar output."
        )

    def segment_from_bin(self, bin_id: int) -> SegmentStats:
        if not 0 <= bin_id < len(self.segments):
            raise IndexError(f"Segment {bin_id} index out of range.")
        return self.segments[bin_id]

    def segments_from_ind(self, ind: int) -> list[SegmentStats]:
        """Segments that contain the sequence with this index."""
        if not 0 <= ind < len(self.sequences):
            raise IndexError(f"Sequence {ind} index out of range.")
        return [seg for seg in self.segments if ind in seg.seq_vec]

    def _scan_database_file(self, path: str | PathLike[str]) -> None:
        self.files.append(SequenceFile(0, str(path)))
        for header, sequence in read_fasta(path):
            seq = SequenceStats(0, trim_fasta_id(header), len(self.sequences), len(sequence))
            self.total_len += seq.length
            self.sequences.append(seq)
        self.sequences.sort(key=lambda seq: seq.length)

    def _default_segment_length(self, seg_count: int, pattern_size: int) -> int:
        if seg_count <= 0:
            raise ValueError("Segment count must be positive.")
        default_seg_len = self.total_len // seg_count + 1
        if default_seg_len <= pattern_size:
            raise ValueError(
                f"Segments of length {default_seg_len}bp can not overlap by "
                f"{pattern_size}bp.\nDecrease the overlap or the number of segments."
            )
        return default_seg_len

    def _scan_database_sequences(self, seg_count: int, overlap: int, exact: bool) -> None:
        default_seg_len = self._default_segment_length(seg_count, overlap)
        lower_bound = default_seg_len // 10
        first_long = next(
            (i for i, seq in enumerate(self.sequences) if seq.length > lower_bound),
            len(self.sequences),
        )
        for seq in self.sequences[:first_long]:
            _log.warning("Sequence: %s is too short and will be skipped.", seq.id)
            self.total_len -= seq.length

        if seg_count < len(self.sequences) - first_long:
            raise ValueError(
                f"Can not split {len(self.sequences)} sequences into {seg_count} segments."
            )

        self._split(
            self.sequences[first_long:],
            default_seg_len,
            overlap,
            seg_count if exact else None,
        )
        self._sort_fasta_order()

    def _split(
        self,
        candidates: Iterable[SequenceStats],
        default_seg_len: int,
        overlap: int,
        exact_count: int | None = None,
    ) -> None:
        remaining_len = self.total_len
        for seq in candidates:
            if seq.length <= default_seg_len * 1.5:
                self._add_segment(seq.ind, 0, seq.length)
            else:
                if exact_count is None:
                    target_len = default_seg_len
                else:
                    remaining_segs = exact_count - len(self.segments)
                    if remaining_segs <= 0:
                        raise ValueError(
                            f"Database was split into more than {exact_count} segments."
                        )
                    target_len = _round_half_up(
                        _f32(_f32(remaining_len) / _f32(remaining_segs))
                    )
                pieces = _round_half_up(seq.length / max(target_len, 1))
                if pieces <= 1:
                    self._add_segment(seq.ind, 0, seq.length)
                else:
                    self._add_pieces(seq, pieces, overlap)
            remaining_len -= seq.length

        if exact_count is not None and len(self.segments) != exact_count:
            raise ValueError(
                f"Database was split into {len(self.segments)} instead of "
                f"{exact_count} segments."
            )

    def _add_pieces(self, seq: SequenceStats, pieces: int, overlap: int) -> None:
        step = math.ceil(_f32(_f32(_f32(seq.length) - _f32(overlap)) / _f32(pieces)))
        self._add_segment(seq.ind, 0, step + overlap)
        start = step
        while start + step + overlap < seq.length - overlap:
            self._add_segment(seq.ind, start, step + overlap)
            start += step
        self._add_segment(seq.ind, start, seq.length - start)

    def _add_segment(self, ind: int, start: int, length: int) -> None:
        self.segments.append(SegmentStats(0, [ind], start, length))

    def _sort_fasta_order(self) -> None:
        self.sequences.sort(key=lambda seq: seq.ind)
        self.segments.sort(key=_fasta_order_key)
        for new_id, segment in enumerate(self.segments):
            segment.id = new_id