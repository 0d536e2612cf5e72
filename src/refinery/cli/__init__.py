"""
Command-line interface for Refinery.
"""

from refinery.cli.main import app

__all__ = ["app"]
