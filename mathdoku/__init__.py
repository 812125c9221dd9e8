"""Mathdoku (KenKen-style) puzzle generation and propagation solving."""

__version__ = "1.0.0"
