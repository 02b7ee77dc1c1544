"""Mutable Integrity Proof stamps for repository commits."""

__version__ = "0.1.0"
