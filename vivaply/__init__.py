"""Vivaply genre-based recommendation service."""
