"""Contiguous and gapped k-mer shapes with their threshold lemmas."""

from __future__ import annotations

import re
from dataclasses import dataclass

_SHAPE_PATTERN = re.compile(r"1[01]*")


@dataclass(frozen=True)
class Kmer:
    """A k-mer shape given as a string of ``1`` (care) and ``0`` (gap) positions."""

    shape: str

    def __post_init__(self) -> None:
        if not _SHAPE_PATTERN.fullmatch(self.shape):
            raise ValueError(
                f"Invalid k-mer shape {self.shape!r}: expected a binary string starting with '1'."
            )

    @classmethod
    def from_size(cls, size: int) -> Kmer:
        """An ungapped k-mer of the given size."""
        if size < 1:
            raise ValueError("k-mer size must be positive.")
        return cls("1" * size)

    @classmethod
    def from_bits(cls, value: int) -> Kmer:
        """A shape from its binary encoding, e.g. ``0b11011``."""
        if value < 1:
            raise ValueError("Shape bit pattern must be positive.")
        return cls(format(value, "b"))

    def is_gapped(self) -> bool:
        return self.weight() < self.size()

    def longest_ungapped(self) -> int:
        """Length of the longest run of consecutive care positions."""
        if not self.is_gapped():
            return self.weight()
        return max(len(run) for run in self.shape.split("0"))

    def ungapped_triplet_length(self) -> int:
        """Number of positions covered by runs of at least three care positions."""
        if not self.is_gapped():
            return self.size()
        positions = [
            match.start() for match in re.finditer(r"(?=111)", self.shape)
        ]
        total = 0
        previous = positions[0] if positions else 0
        for pos in positions:
            total += 1 if pos == previous + 1 else 3
            previous = pos
        return total

    def weight(self) -> int:
        return self.shape.count("1")

    def size(self) -> int:
        return len(self.shape)

    def forward_or_reverse_1(self) -> int:
        """Care positions in the union of the shape and its reverse."""
        if not self.is_gapped():
            return self.size()
        combined = int(self.shape, 2) | int(self.shape[::-1], 2)
        return bin(combined).count("1")

    def effective_size(self, errors: int) -> int:
        if not self.is_gapped():
            return self.size()
        union = self.forward_or_reverse_1()
        if errors < 2:
            return union
        return union - errors + 2

    def to_string(self) -> str:
        return self.shape

    def __str__(self) -> str:
        return self.shape

    def lemma_threshold(self, length: int, errors: int) -> int:
        """Minimum shared k-mers guaranteed by the q-gram lemma."""
        k = self.size()
        if length < k:
            return 0
        if length - k + 1 <= errors * k:
            return 0
        return length - k + 1 - errors * k

    def gapped_threshold(self, length: int, errors: int) -> int:
        """Shared k-mer threshold using the effective size of a gapped shape."""
        k = self.size()
        if length < k:
            return 0
        destroyed = errors * self.effective_size(errors)
        if length - k + 1 <= destroyed:
            return 0
        return length - k + 1 - destroyed