# dreamstellar

Building blocks for a distributed local alignment search over nucleotide
databases. A database is split into overlapping segments, each segment
becomes a bin of an Interleaved Bloom Filter, queries are prefiltered by
shared k-mers, and candidate hits are checked against the definition of an
epsilon match (a local alignment of at least a minimum length with at most a
given error rate).

The package is a plain Python library with no third-party dependencies.

## Installation

```
pip install .
pip install ".[test]"   # adds pytest
```

## What is inside

| Module | Contents |
| --- | --- |
| `dreamstellar.kmer` | `Kmer`: ungapped and gapped k-mer shapes, weight, size, longest ungapped run, effective size, and the k-mer lemma and gapped thresholds |
| `dreamstellar.bin_size` | `bin_size_in_bits`, `parse_size_to_bits` (`"32k"`, `"8g"`, ...) and `parse_bin_paths` |
| `dreamstellar.metadata` | `read_fasta` (FASTA and FASTQ), `trim_fasta_id`, and `Metadata` with `SequenceFile`, `SequenceStats` and `SegmentStats`; splits a database into overlapping segments or one segment per metagenome bin |
| `dreamstellar.metadata_io` | `save_metadata`, `load_metadata` (binary `.bin` layout), `metadata_to_string`, `segment_length_stdev`, `segment_length_cv` |
| `dreamstellar.build_args` | `resolve_shape`, `default_output_paths` (returns `OutputPaths`), `read_bin_list`, `errors_for`, `default_window_size`, `check_window` |
| `dreamstellar.eps_match` | `ExtensionEndPosition` and `longest_eps_match` |
| `dreamstellar.stellar_types` | `StellarMatch`, `StellarComputeStatistics`, `StellarOutputStatistics`, `compare_pos`, `compare_length`, `is_upstream`, `sort_matches` |
| `dreamstellar.prefilter` | `pattern_begin_positions`, `PatternBounds`, `make_pattern_bounds`, `find_pattern_bins` |
| `dreamstellar.xdrop` | `VerificationMethod`, `ScoredSegment`, `VerificationScoring`, `verification_scoring`, `band_diagonals`, `split_at_x_drops`, `verify_order` |

Invalid input raises `ValueError` (or `IndexError` for out-of-range
segment and sequence lookups).

## Examples

K-mer thresholds:

```python
from dreamstellar.kmer import Kmer

kmer = Kmer.from_size(13)
kmer.lemma_threshold(50, 1)      # shared 13-mers guaranteed by a 50 bp match with 1 error

gapped = Kmer.from_bits(0b1111110110110111111)
gapped.is_gapped(), gapped.weight(), gapped.size()
```

Resolving build settings:

```python
from dreamstellar.build_args import resolve_shape, default_output_paths, errors_for

shape = resolve_shape(shape="1111110110110111111")
paths = default_output_paths("ref.fasta")    # ref.index, ref.bin, ref.arg
errors = errors_for(0.04, 50)
```

Splitting a database into segments and saving the result:

```python
from dreamstellar.metadata import Metadata
from dreamstellar.metadata_io import save_metadata, load_metadata, metadata_to_string

meta = Metadata.from_database("ref.fasta", seg_count=16, pattern_size=50,
                              fpr=0.001, information_content=1.0)
print(metadata_to_string(meta))
save_metadata(meta, "ref.bin")
same = load_metadata("ref.bin")
```

Sizing the index:

```python
from dreamstellar.bin_size import bin_size_in_bits, parse_size_to_bits

bits = bin_size_in_bits(fpr=0.05, hash_count=2, elements=100_000)
bits_per_bin = parse_size_to_bits("32k", seg_count=64)
```

Prefiltering one query:

```python
from dreamstellar.prefilter import pattern_begin_positions, make_pattern_bounds, find_pattern_bins

list(pattern_begin_positions(150, 50, 30))   # [0, 30, 60, 90, 100]
```

Splitting an alignment at X-drops:

```python
from dreamstellar.xdrop import verification_scoring, split_at_x_drops

scoring = verification_scoring(epsilon=0.05, min_length=50, x_drop=5, host_length=1000)
pieces = split_at_x_drops("ACGT-ACGT", "ACGTTACGT",
                          scoring.match, scoring.mismatch_indel, scoring.mismatch_indel,
                          scoring.score_drop_off, scoring.min_score)
```

## What this package does not do

It has no command-line program and builds no Interleaved Bloom Filter: it
computes sizes, paths and segment layouts, but neither fills nor queries a
filter. The prefilter functions work on a counting table you supply.
Verification stops at scoring, band placement, X-drop splitting and choosing
the longest epsilon match from given extension ends; there is no banded
alignment or seed extension that would produce those ends, and no search
output is written.

## Running the tests

```
pytest
```