"""Derived attendance and assessment views for the FRSP dashboard."""

__version__ = "0.1.0"
