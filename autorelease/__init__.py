"""Publish GitHub releases for merged release pull requests."""

__version__ = "0.3.0"
