"""
calclang - Compiler Toolchain for the Calculator Language
=========================================================

This package implements a small compiler for the calculator language, a
teaching language with integer variables, read/write, if/fi, do/od loops
and check statements that break out of the enclosing loop.

Main Components
---------------
- **calc**: lexer, recursive descent parser with panic-mode error
    recovery, AST printer, loop structure checks and C code generator

- **cli**: the ``calcc`` command-line compiler

Quick Start
-----------
Parse a program:
    >>> from calclang.calc import parse_source
    >>> program, had_error = parse_source("read n\\nwrite n * 2")

Compile to C:
    >>> from calclang.calc import compile_calc
    >>> c_code = compile_calc("read n\\nwrite n * 2")

Or use the command-line tool:
    $ calcc double.calc -o double.c
"""

__version__ = "1.0.0"

from calclang.errors import CalcError, SourceLocation

__all__ = ["__version__", "CalcError", "SourceLocation"]
