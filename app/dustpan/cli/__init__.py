"""CLI package for dustpan.

This package contains the Typer application and the report printer.
"""

from dustpan.cli.main import app

__all__ = ["app"]
