"""Command-line interface module for the bounded XML parser.

This module provides the ``bounded-xml`` tool for parsing snippets from files
and querying the resulting trees.
"""

from .main import main

__all__ = ["main"]
