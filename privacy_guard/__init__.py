"""Tracking detection and privacy scoring for browsing sessions."""

__version__ = "1.0.0"
