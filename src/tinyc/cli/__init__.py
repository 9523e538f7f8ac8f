"""
tinyc Command-Line Interface
============================

This package provides the `tinyc` command-line tool, a Click-based
front end to the translator with help text and consistent exit codes.
"""

__all__ = ["tinyc"]
