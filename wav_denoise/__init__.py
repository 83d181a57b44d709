"""Recursively denoise 16kHz mono 16-bit WAV files through an HTTP service."""

__version__ = "0.1.0"
