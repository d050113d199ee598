"""CLI package for trace-opener."""

from trace_opener.cli.app import app, main

__all__ = [
    "app",
    "main",
]
