"""
CLI module for Panda.

Provides the command-line interface using Click.
"""

from panda.cli.main import cli, main

__all__ = ["main", "cli"]
