"""Test fixture package for geocache-finder.

Contains fixtures for:
- In-memory geocache stores (SQLite via aiosqlite)
- The API application and its async clients
"""
