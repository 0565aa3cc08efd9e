"""Resolution of index build settings that depend on one another."""

from __future__ import annotations

import math
import re
import struct
from os import PathLike
from pathlib import Path
from typing import NamedTuple

from dreamstellar.kmer import Kmer

_SHAPE_PATTERN = re.compile(r"[01]+")


def _f32(value: float) -> float:
    return struct.unpack("f", struct.pack("f", value))[0]


class OutputPaths(NamedTuple):
    """Files written by a build: index, database metadata and search profile."""

    index: Path
    metadata: Path
    search_profile: Path


def resolve_shape(kmer_size: int | None = None, shape: str | None = None) -> Kmer | None:
    """The k-mer shape chosen by ``--kmer`` or ``--shape``, or None if neither."""
    if kmer_size is not None and shape is not None:
        raise ValueError("Arguments --kmer and --shape are mutually exclusive.")
    if kmer_size is not None:
        return Kmer.from_size(kmer_size)
    if shape is not None:
        if not _SHAPE_PATTERN.fullmatch(shape):
            raise ValueError(f"Shape {shape!r} must consist of 0 and 1 only.")
        return Kmer.from_bits(int(shape, 2))
    return None


def default_output_paths(
    db_file: str | PathLike[str], out_path: str | PathLike[str] | None = None
) -> OutputPaths:
    """Index path (defaulting to the database with ``.index``) and its companions."""
    index = Path(out_path) if out_path is not None else Path(db_file).with_suffix(".index")
    metadata = index.with_suffix(".bin")
    return OutputPaths(index, metadata, metadata.with_suffix(".arg"))


def read_bin_list(path: str | PathLike[str]) -> list[str]:
    """Non-empty lines of a file listing one cluster path per line."""
    with open(path) as handle:
        return [line.rstrip("\r\n") for line in handle if line.rstrip("\r\n")]


def errors_for(error_rate: float, pattern_size: int) -> int:
    """Number of errors allowed in a pattern at the given error rate."""
    if error_rate < 0 or pattern_size < 0:
        raise ValueError("Error rate and pattern size must not be negative.")
    return math.ceil(_f32(_f32(error_rate) * _f32(pattern_size)))


def default_window_size(kmer_size: int, fast: bool = False) -> int:
    """Window size used when none is given; fast mode indexes minimisers."""
    return kmer_size + 2 if fast else kmer_size


def check_window(kmer_size: int, window_size: int) -> int:
    """Return the window size, rejecting one smaller than the k-mer."""
    if kmer_size > window_size:
        raise ValueError("The k-mer size cannot be bigger than the window size.")
    return window_size