"""Timed product test bench: a cancellable background job with dual-source progress."""

__version__ = "1.0.0"
