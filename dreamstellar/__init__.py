"""K-mer shapes, database segmentation, IBF sizing, prefiltering and epsilon-match verification helpers."""

__version__ = "1.0.0"