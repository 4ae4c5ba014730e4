"""
LC3 VM Command-Line Interface
=============================

This package provides the command-line tools for the LC-3 VM:

- **lc3**: load one or more object images and run them on the console

Each tool is implemented as a Click-based CLI application with
comprehensive help and error reporting.
"""

__all__ = ["lc3"]
