"""
RuntimeKit command-line interface.

Usage: runtimekit [options] COMMAND [args]
"""

from runtimekit.cli.parser import CLI, main

__all__ = ["CLI", "main"]
