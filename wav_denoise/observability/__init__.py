"""Logging and run metrics."""
