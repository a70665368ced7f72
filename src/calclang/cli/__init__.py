"""
calclang Command-Line Interface
===============================

- **calcc**: calculator language compiler

The tool is a Click-based CLI application with help text and unified
error reporting (see calclang.cli.errors).
"""

__all__ = ["calcc"]
