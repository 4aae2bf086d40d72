"""Nearby photo lookup API."""
