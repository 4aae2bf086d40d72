"""Geocache Finder: radius search over a geocache dataset."""

__version__ = "0.1.0"
