"""Binary persistence, text dumps and summary statistics of database metadata."""

from __future__ import annotations

import math
import struct
from os import PathLike
from typing import BinaryIO

from dreamstellar.metadata import Metadata, SegmentStats, SequenceFile, SequenceStats

_U64 = struct.Struct("<Q")
_F32 = struct.Struct("<f")
_F64 = struct.Struct("<d")


class _Writer:
    def __init__(self, handle: BinaryIO) -> None:
        self._handle = handle

    def u64(self, value: int) -> None:
        self._handle.write(_U64.pack(value))

    def f32(self, value: float) -> None:
        self._handle.write(_F32.pack(value))

    def f64(self, value: float) -> None:
        self._handle.write(_F64.pack(value))

    def text(self, value: str) -> None:
        data = value.encode()
        self.u64(len(data))
        self._handle.write(data)


class _Reader:
    def __init__(self, handle: BinaryIO) -> None:
        self._handle = handle

    def _take(self, size: int) -> bytes:
        data = self._handle.read(size)
        if len(data) != size:
            raise ValueError("Metadata file is truncated.")
        return data

    def u64(self) -> int:
        return _U64.unpack(self._take(_U64.size))[0]

    def f32(self) -> float:
        return _F32.unpack(self._take(_F32.size))[0]

    def f64(self) -> float:
        return _F64.unpack(self._take(_F64.size))[0]

    def text(self) -> str:
        return self._take(self.u64()).decode()


def save_metadata(metadata: Metadata, path: str | PathLike[str]) -> None:
    """Write metadata in the binary archive layout used for ``.bin`` files."""
    with open(path, "wb") as handle:
        out = _Writer(handle)
        out.u64(metadata.total_len)
        out.u64(metadata.pattern_size)

        out.u64(len(metadata.files))
        for seq_file in metadata.files:
            out.u64(seq_file.id)
            out.text(seq_file.path)

        out.u64(len(metadata.sequences))
        for seq in metadata.sequences:
            out.u64(seq.file_id)
            out.text(seq.id)
            out.u64(seq.ind)
            out.u64(seq.length)

        out.u64(len(metadata.segments))
        for seg in metadata.segments:
            out.u64(seg.id)
            out.u64(len(seg.seq_vec))
            for ind in seg.seq_vec:
                out.u64(ind)
            out.u64(seg.start)
            out.u64(seg.length)

        out.f32(metadata.ibf_fpr)
        out.f64(metadata.information_content)


def load_metadata(path: str | PathLike[str]) -> Metadata:
    """Read metadata written by :func:`save_metadata`."""
    with open(path, "rb") as handle:
        src = _Reader(handle)
        total_len = src.u64()
        pattern_size = src.u64()
        files = [SequenceFile(src.u64(), src.text()) for _ in range(src.u64())]
        sequences = [
            SequenceStats(src.u64(), src.text(), src.u64(), src.u64())
            for _ in range(src.u64())
        ]
        segments = []
        for _ in range(src.u64()):
            seg_id = src.u64()
            seq_vec = [src.u64() for _ in range(src.u64())]
            segments.append(SegmentStats(seg_id, seq_vec, src.u64(), src.u64()))
        ibf_fpr = src.f32()
        information_content = src.f64()
    return Metadata(
        total_len=total_len,
        pattern_size=pattern_size,
        ibf_fpr=ibf_fpr,
        information_content=information_content,
        files=files,
        sequences=sequences,
        segments=segments,
    )


def metadata_to_string(metadata: Metadata) -> str:
    """Tab separated listing of sequences and segments, each block ending in ``$``."""
    lines = [f"{seq.id}\t{seq.ind}\t{seq.length}\n" for seq in metadata.sequences]
    lines.append("$\n")
    for seg_id, seg in enumerate(metadata.segments):
        inds = "".join(f"{ind}\t" for ind in seg.seq_vec)
        lines.append(f"{seg_id}\t{inds}{seg.start}\t{seg.length}\n")
    lines.append("$\n")
    return "".join(lines)


def _length_moments(metadata: Metadata) -> tuple[float, float]:
    lengths = [seg.length for seg in metadata.segments]
    if not lengths:
        raise ValueError("Metadata has no segments.")
    mean = sum(lengths) / len(lengths)
    sq_sum = sum(float(length) * length for length in lengths)
    variance = max(0.0, sq_sum / len(lengths) - mean * mean)
    return mean, math.sqrt(variance)


def segment_length_stdev(metadata: Metadata) -> float:
    """Population standard deviation of segment lengths."""
    return _length_moments(metadata)[1]


def segment_length_cv(metadata: Metadata) -> float:
    """Coefficient of variation of segment lengths."""
    mean, stdev = _length_moments(metadata)
    if mean == 0:
        raise ValueError("Segment lengths are all zero.")
    return stdev / mean