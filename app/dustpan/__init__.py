"""dustpan - find and trash stale build-artifact directories."""

__version__ = "0.1.0"
