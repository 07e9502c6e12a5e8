"""
CLI module for jsonprov.

Provides the command-line interface using Click.
"""

from jsonprov.cli.main import cli, main

__all__ = ["main", "cli"]
