"""Geocache search API."""
