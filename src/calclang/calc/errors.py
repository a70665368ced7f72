"""
Calculator Language Front-End Error Hierarchy
=============================================

This module defines the exceptions raised by the lexer and parser of the
calculator language. All of them inherit from CalcSyntaxError, which
itself inherits from the toolchain-wide CalcError.

Exception Hierarchy
-------------------
CalcSyntaxError (base for all front-end errors)
├── LexicalError - malformed literal or oversized lexeme (fatal)
├── InvalidCharacterError - character the lexer cannot classify
└── ParseError - recoverable grammar errors
    ├── StatementListError - token that cannot start or end a statement list
    ├── StatementError - expected terminal missing inside a statement
    ├── RelationError - token that cannot follow a relation's left operand
    └── ExpressionError - token that cannot start or continue an expression

Only LexicalError aborts a run. The ParseError subclasses are caught by the
nonterminal that raised them, recorded in an ErrorCollector, and parsing
resumes after panic-mode recovery.

Error Message Format
--------------------
    loop.calc:3:7: error: StatementError: unexpected 'od' in stmt
        x := od
             ^
    hint: expected ':='
"""

from typing import Optional, List

from calclang.errors import CalcError, SourceLocation


# =============================================================================
# Base Front-End Exception
# =============================================================================

class CalcSyntaxError(CalcError):
    """
    Base exception for all calculator language front-end errors.

    Provides source location tracking, source line context and an
    optional hint.

    Attributes:
        message: The error description
        location: Where in the source the error occurred
        hint: A suggestion for fixing the error
        source_line: The actual source text at the error location
    """

    def __init__(
        self,
        message: str,
        location: Optional[SourceLocation] = None,
        hint: Optional[str] = None,
        source_line: Optional[str] = None,
    ):
        self.message = message
        self.location = location
        self.hint = hint
        self.source_line = source_line
        super().__init__(self._format_message())

    @property
    def kind(self) -> str:
        """Name of the error kind, as shown in diagnostics."""
        return self.__class__.__name__

    def _format_message(self) -> str:
        """
        Format the error message with location, source context, and hint.

            loop.calc:3:7: error: StatementError: unexpected 'od' in stmt
                x := od
                     ^
            hint: expected ':='
        """
        parts = []

        if self.location:
            parts.append(f"{self.location}: error: {self.kind}: {self.message}")
        else:
            parts.append(f"error: {self.kind}: {self.message}")

        if self.source_line is not None and self.location is not None:
            parts.append(f"    {self.source_line}")
            if self.location.column > 0:
                padding = " " * (4 + self.location.column - 1)
                parts.append(f"{padding}^")

        if self.hint:
            parts.append(f"hint: {self.hint}")

        return "\n".join(parts)

    def diagnostic_line(self) -> str:
        """
        Single-line form of the error for the diagnostic stream.

        Names the error kind, the message (which quotes the offending
        lexeme) and the 1-based source line.
        """
        if self.location:
            return f"{self.kind} at line {self.location.line}: {self.message}"
        return f"{self.kind}: {self.message}"


# =============================================================================
# Lexer Errors
# =============================================================================

class LexicalError(CalcSyntaxError):
    """
    Malformed token at the character level.

    Fatal: the compiler stops as soon as the lexer raises it.

    Examples:
        x := 12ab       // literal running into identifier characters
        <identifier of more than 99 characters>
    """
    pass


class InvalidCharacterError(CalcSyntaxError):
    """
    Character or operator fragment that the lexer cannot classify.

    The lexer records this error and hands the parser a 'none' token,
    which the parser then treats as an unexpected token.
    """

    def __init__(
        self,
        text: str,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
        hint: Optional[str] = None,
    ):
        self.text = text
        super().__init__(
            f"invalid character sequence '{text}'",
            location=location,
            hint=hint,
            source_line=source_line,
        )


# =============================================================================
# Recoverable Parse Errors
# =============================================================================

class ParseError(CalcSyntaxError):
    """
    Recoverable grammar error.

    Raised when the lookahead token does not fit the grammar at the
    current position. The parser catches it at the nonterminal that owns
    the recovery boundary, so it never escapes CalcParser.

    Attributes:
        found: Lexeme of the offending token
        context: Grammar nonterminal being parsed
        expected: Description of what would have been accepted
    """

    def __init__(
        self,
        found: str,
        context: str,
        expected: Optional[str] = None,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.found = found
        self.context = context
        self.expected = expected

        hint = f"expected {expected}" if expected else None
        super().__init__(
            f"unexpected '{found}' in {context}",
            location=location,
            hint=hint,
            source_line=source_line,
        )


class StatementListError(ParseError):
    """Token that can neither start a statement nor end a statement list."""
    pass


class StatementError(ParseError):
    """
    Expected terminal missing inside a statement.

    Examples:
        x 1             // missing ':='
        read 5          // 'read' needs an identifier
        if a < b x := 1 // missing 'fi'
    """
    pass


class RelationError(ParseError):
    """Token that cannot follow the left operand of a relation."""
    pass


class ExpressionError(ParseError):
    """
    Token that cannot start or continue an expression.

    Examples:
        write )
        x := (a + b
    """
    pass


# =============================================================================
# Error Collection (for multi-error reporting)
# =============================================================================

class ErrorCollector:
    """
    Collects multiple errors for batch reporting.

    The lexer and parser share one collector so that every diagnostic of
    a run ends up in a single, ordered list.

    Example:
        collector = ErrorCollector()
        parser = CalcParser(tokens, errors=collector)
        program, had_error = parser.parse_program()
        if collector.has_errors():
            print(collector.report())
    """

    def __init__(self):
        self.errors: List[CalcSyntaxError] = []
        self.warnings: List[str] = []

    def add(self, error: CalcSyntaxError) -> None:
        """Add an error to the collection."""
        self.errors.append(error)

    def add_warning(self, message: str, location: Optional[SourceLocation] = None) -> None:
        """Add a warning message."""
        if location:
            self.warnings.append(f"{location}: warning: {message}")
        else:
            self.warnings.append(f"warning: {message}")

    def has_errors(self) -> bool:
        """Return True if any errors have been collected."""
        return len(self.errors) > 0

    def error_count(self) -> int:
        """Return the number of collected errors."""
        return len(self.errors)

    def warning_count(self) -> int:
        """Return the number of collected warnings."""
        return len(self.warnings)

    def diagnostic_lines(self) -> List[str]:
        """One line per collected error, in the order they occurred."""
        return [error.diagnostic_line() for error in self.errors]

    def report(self) -> str:
        """Format all errors and warnings for display."""
        lines = []

        for error in self.errors:
            lines.append(str(error))
            lines.append("")

        for warning in self.warnings:
            lines.append(warning)

        error_word = "error" if len(self.errors) == 1 else "errors"
        warning_word = "warning" if len(self.warnings) == 1 else "warnings"
        lines.append(
            f"\n{len(self.errors)} {error_word}, {len(self.warnings)} {warning_word}"
        )

        return "\n".join(lines)

    def clear(self) -> None:
        """Clear all collected errors and warnings."""
        self.errors.clear()
        self.warnings.clear()
