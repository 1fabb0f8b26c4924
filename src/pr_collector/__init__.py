"""Collect recent pull requests for a list of authors."""

__version__ = "1.0.0"
