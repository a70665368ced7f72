"""
Calculator Language Lexer (Tokenizer)
=====================================

This module implements the lexer for the calculator language. It converts
source text into a stream of classified tokens for the parser.

Token Categories
----------------
- Keywords: read, write, if, fi, do, od, check
- Identifiers: letter followed by letters, digits and underscores
- Literals: unsigned decimal integers
- Operators: :=  +  -  *  /  ==  <>  <  >  <=  >=
- Delimiters: ( )

Anything else (a lone ':', a lone '=', '?', '!', ...) is reported as an
InvalidCharacterError and handed to the parser as a NONE token, so the
parser's panic-mode recovery deals with it like any other unexpected
token. A literal that runs straight into identifier characters ("12ab")
or a lexeme longer than 99 characters raises a fatal LexicalError.

Example Usage
-------------
>>> from calclang.calc.lexer import CalcLexer
>>> lexer = CalcLexer("read n\\nwrite n * 2", "double.calc")
>>> for token in lexer.tokenize():
...     print(token)
Token(READ, 'read', 1:1)
Token(ID, 'n', 1:6)
Token(WRITE, 'write', 2:1)
Token(ID, 'n', 2:7)
Token(MUL, '*', 2:9)
Token(LITERAL, '2', 2:11)
Token(EOF, 2:12)
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Iterator, Optional
import logging
import string

from calclang.errors import SourceLocation
from calclang.calc.errors import (
    ErrorCollector,
    LexicalError,
    InvalidCharacterError,
)

logger = logging.getLogger(__name__)

# Longest lexeme the toolchain accepts
MAX_LEXEME_LENGTH = 99


# =============================================================================
# Token Type Enumeration
# =============================================================================

class CalcTokenType(Enum):
    """
    Token types for the calculator language.

    A closed enumeration: the parser dispatches on these directly. NONE
    is the "no token" sentinel the lexer emits after reporting an invalid
    character; it is never valid parser input.
    """

    # === Statements ===
    READ = auto()           # read
    WRITE = auto()          # write

    # === Identifiers and Literals ===
    ID = auto()             # variable names
    LITERAL = auto()        # decimal integers

    # === Assignment and Arithmetic ===
    ASSIGN = auto()         # :=
    ADD = auto()            # +
    SUB = auto()            # -
    MUL = auto()            # *
    DIV = auto()            # /

    # === Delimiters ===
    LPAREN = auto()         # (
    RPAREN = auto()         # )

    # === Structural ===
    EOF = auto()            # end of input

    # === Control Flow ===
    IF = auto()             # if
    FI = auto()             # fi
    DO = auto()             # do
    OD = auto()             # od
    CHECK = auto()          # check

    # === Relational Operators ===
    EQ = auto()             # ==
    NOTEQ = auto()          # <>
    LT = auto()             # <
    GT = auto()             # >
    LTE = auto()            # <=
    GTE = auto()            # >=

    # === Error Sentinel ===
    NONE = auto()           # lexical error already reported


# =============================================================================
# Keyword Mapping
# =============================================================================

KEYWORDS: dict[str, CalcTokenType] = {
    "read": CalcTokenType.READ,
    "write": CalcTokenType.WRITE,
    "if": CalcTokenType.IF,
    "fi": CalcTokenType.FI,
    "do": CalcTokenType.DO,
    "od": CalcTokenType.OD,
    "check": CalcTokenType.CHECK,
}


# =============================================================================
# Token Data Class
# =============================================================================

@dataclass(frozen=True)
class CalcToken:
    """
    Represents a single token of calculator language source.

    Attributes:
        type: The CalcTokenType classification
        lexeme: The source text of the token ("" for EOF)
        line: Line number in source (1-indexed)
        column: Column number in source (1-indexed)
        filename: Name of the source file
    """
    type: CalcTokenType
    lexeme: str
    line: int
    column: int = 0
    filename: str = "<input>"

    def __repr__(self) -> str:
        """Format token for debugging output."""
        if self.lexeme:
            return f"Token({self.type.name}, {self.lexeme!r}, {self.line}:{self.column})"
        return f"Token({self.type.name}, {self.line}:{self.column})"

    @property
    def location(self) -> SourceLocation:
        """Return a SourceLocation for error reporting."""
        return SourceLocation(self.filename, self.line, self.column)

    @property
    def display(self) -> str:
        """Text used when quoting this token in a diagnostic."""
        if self.type == CalcTokenType.EOF:
            return "end of file"
        return self.lexeme or self.type.name.lower()


# =============================================================================
# Lexer Implementation
# =============================================================================

class CalcLexer:
    """
    Tokenizes calculator language source code.

    The lexer can be consumed two ways: as a generator through tokenize(),
    or pull-based through next_token(), which keeps returning EOF once the
    input is exhausted.

    Usage:
        lexer = CalcLexer(source_text, filename)
        tokens = list(lexer.tokenize())

    Attributes:
        source: The source code being tokenized
        filename: Name of the source file (for error reporting)
        errors: Collector receiving InvalidCharacterError diagnostics
    """

    IDENT_START = string.ascii_letters
    IDENT_CHARS = string.ascii_letters + string.digits + "_"

    SINGLE_TOKENS = {
        "+": CalcTokenType.ADD,
        "-": CalcTokenType.SUB,
        "*": CalcTokenType.MUL,
        "/": CalcTokenType.DIV,
        "(": CalcTokenType.LPAREN,
        ")": CalcTokenType.RPAREN,
    }

    def __init__(
        self,
        source: str,
        filename: str = "<input>",
        errors: Optional[ErrorCollector] = None,
    ):
        """
        Initialize the lexer with source code.

        Args:
            source: The source text to tokenize
            filename: Name of the source file (for error messages)
            errors: Collector for recoverable lexical diagnostics
        """
        self.source = source
        self.filename = filename
        self.errors = errors if errors is not None else ErrorCollector()

        self._pos = 0
        self._line = 1
        self._column = 1
        self._line_start_pos = 0

        self._stream: Optional[Iterator[CalcToken]] = None
        self._eof_token: Optional[CalcToken] = None

    def tokenize(self) -> Iterator[CalcToken]:
        """
        Generate tokens from the source code, ending with one EOF token.

        Raises:
            LexicalError: On a malformed literal or oversized lexeme
        """
        while True:
            self._skip_whitespace()
            if self._at_end():
                break
            yield self._scan_token()

        self._eof_token = self._make_token(CalcTokenType.EOF, "")
        yield self._eof_token

    def next_token(self) -> CalcToken:
        """
        Return the next token, pulling it from the source on demand.

        After the EOF token has been returned once, every further call
        returns EOF again.
        """
        if self._stream is None:
            self._stream = self.tokenize()
        token = next(self._stream, None)
        if token is None:
            return self._eof_token
        return token

    # =========================================================================
    # Character Access Methods
    # =========================================================================

    def _at_end(self) -> bool:
        return self._pos >= len(self.source)

    def _peek(self, offset: int = 0) -> str:
        """Character at current position + offset, or '' past the end."""
        pos = self._pos + offset
        if pos >= len(self.source):
            return ""
        return self.source[pos]

    def _advance(self) -> str:
        """Consume and return the current character, tracking line/column."""
        if self._at_end():
            return ""

        char = self.source[self._pos]
        self._pos += 1

        if char == "\n":
            self._line += 1
            self._column = 1
            self._line_start_pos = self._pos
        else:
            self._column += 1

        return char

    def _match(self, expected: str) -> bool:
        """Consume next character if it matches expected."""
        if self._peek() == expected:
            self._advance()
            return True
        return False

    def _skip_whitespace(self) -> None:
        while not self._at_end() and self._peek().isspace():
            self._advance()

    # =========================================================================
    # Token Creation
    # =========================================================================

    def _make_token(
        self,
        token_type: CalcTokenType,
        lexeme: str,
        start_line: Optional[int] = None,
        start_column: Optional[int] = None,
    ) -> CalcToken:
        return CalcToken(
            type=token_type,
            lexeme=lexeme,
            line=start_line or self._line,
            column=start_column or self._column,
            filename=self.filename,
        )

    def _get_current_line(self) -> str:
        """Get the current line of source text for error reporting."""
        line_end = self.source.find("\n", self._line_start_pos)
        if line_end == -1:
            line_end = len(self.source)
        return self.source[self._line_start_pos:line_end]

    def _check_length(self, lexeme: str, start_line: int, start_column: int) -> None:
        if len(lexeme) > MAX_LEXEME_LENGTH:
            raise LexicalError(
                f"lexeme '{lexeme[:16]}...' is {len(lexeme)} characters long",
                SourceLocation(self.filename, start_line, start_column),
                hint=f"lexemes are limited to {MAX_LEXEME_LENGTH} characters",
                source_line=self._get_current_line(),
            )

    # =========================================================================
    # Token Scanning
    # =========================================================================

    def _scan_token(self) -> CalcToken:
        start_line = self._line
        start_column = self._column

        char = self._peek()

        if char in self.IDENT_START:
            return self._scan_identifier(start_line, start_column)

        if char in string.digits:
            return self._scan_literal(start_line, start_column)

        return self._scan_operator(start_line, start_column)

    def _scan_identifier(self, start_line: int, start_column: int) -> CalcToken:
        """
        Scan an identifier or keyword.

        Keywords are reserved: 'do' is always the loop keyword, never a
        variable name.
        """
        chars = []
        while self._peek() and self._peek() in self.IDENT_CHARS:
            chars.append(self._advance())

        name = "".join(chars)
        self._check_length(name, start_line, start_column)

        token_type = KEYWORDS.get(name, CalcTokenType.ID)
        return self._make_token(token_type, name, start_line, start_column)

    def _scan_literal(self, start_line: int, start_column: int) -> CalcToken:
        """
        Scan a decimal literal.

        Raises:
            LexicalError: If the digits run straight into an identifier
        """
        chars = []
        while self._peek() and self._peek() in string.digits:
            chars.append(self._advance())

        follower = self._peek()
        if follower and follower in self.IDENT_CHARS:
            raise LexicalError(
                f"malformed literal '{''.join(chars)}{follower}'",
                SourceLocation(self.filename, self._line, self._column),
                hint="separate the number from the following name with a space",
                source_line=self._get_current_line(),
            )

        text = "".join(chars)
        self._check_length(text, start_line, start_column)
        return self._make_token(CalcTokenType.LITERAL, text, start_line, start_column)

    def _scan_operator(self, start_line: int, start_column: int) -> CalcToken:
        """
        Scan an operator or delimiter.

        Invalid sequences are reported and turned into NONE tokens; the
        character after a lone ':' or '=' is left for the next token.
        """
        char = self._advance()

        if char in self.SINGLE_TOKENS:
            return self._make_token(self.SINGLE_TOKENS[char], char, start_line, start_column)

        if char == ":":
            if self._match("="):
                return self._make_token(CalcTokenType.ASSIGN, ":=", start_line, start_column)
            return self._invalid(char, start_line, start_column, hint="did you mean ':='?")

        if char == "=":
            if self._match("="):
                return self._make_token(CalcTokenType.EQ, "==", start_line, start_column)
            return self._invalid(char, start_line, start_column, hint="did you mean '=='?")

        if char == "<":
            if self._match(">"):
                return self._make_token(CalcTokenType.NOTEQ, "<>", start_line, start_column)
            if self._match("="):
                return self._make_token(CalcTokenType.LTE, "<=", start_line, start_column)
            return self._make_token(CalcTokenType.LT, "<", start_line, start_column)

        if char == ">":
            if self._match("="):
                return self._make_token(CalcTokenType.GTE, ">=", start_line, start_column)
            return self._make_token(CalcTokenType.GT, ">", start_line, start_column)

        return self._invalid(char, start_line, start_column)

    def _invalid(
        self,
        text: str,
        start_line: int,
        start_column: int,
        hint: Optional[str] = None,
    ) -> CalcToken:
        """Report an invalid character sequence and return a NONE token."""
        error = InvalidCharacterError(
            text,
            SourceLocation(self.filename, start_line, start_column),
            self._get_current_line(),
            hint=hint,
        )
        self.errors.add(error)
        logger.debug(f"Invalid character {text!r} at {error.location}")
        return self._make_token(CalcTokenType.NONE, text, start_line, start_column)
