"""Utility helpers for file IO and logging."""
