"""Bundled data files for dustpan."""
