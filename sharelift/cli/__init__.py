"""
sharelift CLI.
"""

from sharelift.cli.main import main

__all__ = ["main"]
