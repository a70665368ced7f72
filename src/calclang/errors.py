"""
calclang Error Hierarchy
========================

This module defines the root of the exception hierarchy for calclang.
All exceptions inherit from CalcError, allowing callers to catch every
toolchain error with a single except clause if desired.

Exception Hierarchy
-------------------
CalcError (base)
└── CalcSyntaxError (front end, see calclang.calc.errors)
    ├── LexicalError - fatal character-level error
    ├── InvalidCharacterError - unclassifiable character (recoverable)
    ├── StatementListError - bad token at a statement list
    ├── StatementError - bad token inside a statement
    ├── RelationError - bad token after a relation's left operand
    └── ExpressionError - bad token inside an expression

Design Philosophy
-----------------
Each exception captures source location information (filename, line,
column) when applicable, so diagnostics can point the user at the
offending token.

Error messages follow this format:
    filename:line:column: error: description
    source_line_text
        ^ (pointer to error location)
    hint: suggestion for fixing (when available)
"""

from dataclasses import dataclass


# =============================================================================
# Base Exception Class
# =============================================================================

class CalcError(Exception):
    """
    Base exception for all calclang errors.

    Catch this to handle any error raised by the toolchain:

        try:
            compiler.compile_file("loop.calc")
        except CalcError as e:
            print(f"Error: {e}")
    """
    pass


# =============================================================================
# Source Location Tracking
# =============================================================================

@dataclass(frozen=True)
class SourceLocation:
    """
    Represents a location in source code for error reporting.

    Tokens, AST nodes and diagnostics all carry one of these. The frozen
    design means locations can be shared freely between nodes.

    Attributes:
        filename: Name of the source file (or "<input>" for string input)
        line: Line number (1-indexed)
        column: Column number (1-indexed, 0 when unknown)
    """
    filename: str
    line: int
    column: int = 0

    def __str__(self) -> str:
        """Format as 'filename:line:column' (or 'filename:line')."""
        if self.column > 0:
            return f"{self.filename}:{self.line}:{self.column}"
        return f"{self.filename}:{self.line}"
