"""Utility modules for dustpan."""
