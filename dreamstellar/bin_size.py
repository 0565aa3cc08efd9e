"""Sizing of interleaved Bloom filter bins and naming of per-bin files."""

from __future__ import annotations

import math
import re
from collections.abc import Sequence
from os import PathLike
from pathlib import Path

_MULTIPLIERS = {
    "t": 8 * 1024**4,
    "g": 8 * 1024**3,
    "m": 8 * 1024**2,
    "k": 8 * 1024,
}


def bin_size_in_bits(fpr: float, hash_count: int, elements: int) -> int:
    """Bits needed per bin to hold ``elements`` at the given false positive rate."""
    if hash_count <= 0:
        raise ValueError("hash_count must be positive.")
    if not 0.0 < fpr < 1.0:
        raise ValueError("fpr must lie strictly between 0 and 1.")
    numerator = -float(elements * hash_count)
    denominator = math.log(1 - math.exp(math.log(fpr) / hash_count))
    return int(math.ceil(numerator / denominator))


def parse_bin_paths(
    bin_paths: Sequence[str | PathLike[str]],
    out_dir: str | PathLike[str],
    seg_count: int,
    extension: str = "minimiser",
) -> list[str]:
    """Paths of the per-bin files written to ``out_dir``.

    With several input files there is one output per file; with a single file
    there is one output per segment.
    """
    if not bin_paths:
        raise ValueError("At least one bin path is required.")
    out = Path(out_dir)
    if len(bin_paths) > 1:
        return [
            str(out / Path(Path(bin_file).stem).with_suffix("." + extension))
            for bin_file in bin_paths
        ]
    stem = Path(bin_paths[0]).stem
    return [str(out / f"{stem}.{bin_id}.{extension}") for bin_id in range(seg_count)]


def parse_size_to_bits(size: str, seg_count: int) -> int:
    """Bits per bin for a total filter size such as ``"8g"`` or ``"32 k"``."""
    compact = size.replace(" ", "")
    if not compact:
        raise ValueError("Use {k, m, g, t} to pass size. E.g., --size 8g.")
    multiplier = _MULTIPLIERS.get(compact[-1].lower())
    if multiplier is None:
        raise ValueError("Use {k, m, g, t} to pass size. E.g., --size 8g.")
    digits = re.match(r"\d*", compact[:-1]).group()
    total = (int(digits) if digits else 0) * multiplier
    technical_bins = ((seg_count + 63) >> 6) << 6
    return total // technical_bins