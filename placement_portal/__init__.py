"""Internship and placement portal backend."""

__version__ = "1.0.0"
