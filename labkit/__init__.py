"""Bit-pattern inspectors, puzzle reference answers, image-kernel benchmarking and a tiny shell."""

__version__ = "0.1.0"