"""
Calculator Language Recursive Descent Parser
============================================

This module implements the LL(1) recursive descent parser for the
calculator language. It pulls tokens from the lexer one at a time and
builds the Abstract Syntax Tree (AST) as it goes, recovering from syntax
errors instead of stopping at the first one.

Grammar
-------
program      -> stmt_list eof
stmt_list    -> stmt stmt_list | ε
stmt         -> id := expr | read id | write relation
              | if relation stmt_list fi | do stmt_list od
              | check relation
relation     -> expr expr_tail
expr_tail    -> relation_op expr | ε
expr         -> term term_tail
term_tail    -> add_op term term_tail | ε
term         -> factor factor_tail
factor_tail  -> mul_op factor factor_tail | ε
factor       -> id | literal | ( relation )

Expression Trees
----------------
The expression grammar is right-recursive, and the tree is built in the
same single pass without an operator stack. Each relation, expr and term
call owns a "level root": a BinaryExpression with no operator yet.

- Operands are attached with attach_operand(): the first empty child slot
  found walking down the right spine of the root.
- Operators are inserted with insert_operator(): the first one at a level
  is stored on the root itself; each later one becomes a new node that
  takes over the root's right child as its left operand.

So operators of one precedence level nest to the right:

    a + b - c   parses as   (+ a (- b c))
    a * b + c   parses as   (+ (* a b) c)

Error Recovery
--------------
Panic mode with inherited synchronization sets. Every parse method
receives the set of tokens that may legally follow it *at its call site*
(the callers union in what they know), and recovery discards tokens until
one of them, a FIRST token of the construct, a restart token or end of
file shows up. Inside a relation the term and factor tails end quietly on
a token they cannot use, so expr_tail reports it as a RelationError.
Each error is recorded in the ErrorCollector and sets the
parser's error flag; the parse always runs to end of file and returns a
best-effort tree.

Example Usage
-------------
>>> from calclang.calc.parser import parse_source
>>> program, had_error = parse_source("x := a + b - c")
>>> program.statements[0].expression.operator
<BinaryOperator.ADD: '+'>
"""

from typing import Iterable, Optional, Union
import logging

from calclang.errors import SourceLocation
from calclang.calc.lexer import CalcLexer, CalcToken, CalcTokenType as T
from calclang.calc.grammar import (
    Nonterminal,
    TokenSet,
    FIRST,
    FOLLOW,
    NULLABLE,
    RELATION_OPERATORS,
    ADD_OPERATORS,
    MUL_OPERATORS,
    STATEMENT_STARTERS,
    EXPRESSION_STARTERS,
    RESTART_TOKENS,
    describe,
)
from calclang.calc.ast import (
    ProgramNode,
    Statement,
    AssignStatement,
    ReadStatement,
    WriteStatement,
    IfStatement,
    DoStatement,
    CheckStatement,
    Expression,
    BinaryExpression,
    BinaryOperator,
    IdentifierExpression,
    NumberLiteral,
    TOKEN_OPERATORS,
)
from calclang.calc.errors import (
    ErrorCollector,
    ParseError,
    StatementListError,
    StatementError,
    RelationError,
    ExpressionError,
)

logger = logging.getLogger(__name__)


# =============================================================================
# Expression Tree Construction
# =============================================================================

def attach_operand(root: BinaryExpression, operand: Expression) -> bool:
    """
    Put an operand into the first empty child slot under root.

    Fills root.left, else root.right, else walks into root.right and
    tries again.

    Returns:
        False if the right spine ends in a leaf (only possible on the
        error-recovery path); the operand is then not attached.
    """
    node = root
    while True:
        if node.left is None:
            node.left = operand
            return True
        if node.right is None:
            node.right = operand
            return True
        if not isinstance(node.right, BinaryExpression):
            return False
        node = node.right


def insert_operator(
    root: BinaryExpression,
    operator: BinaryOperator,
    location: Optional[SourceLocation] = None,
) -> None:
    """
    Add an operator at the level owned by root.

    The first operator is stored on root itself. A later one becomes a new
    node whose left child is root's current right child, and that new node
    replaces root's right child.
    """
    if root.operator is None:
        root.operator = operator
        return

    node = BinaryExpression(
        location=location or root.location,
        operator=operator,
        left=root.right,
    )
    root.right = node


def collapse(root: BinaryExpression) -> Optional[Expression]:
    """Finish a level: a root that never received an operator is replaced by its operand."""
    if root.operator is None and root.right is None:
        return root.left
    return root


# =============================================================================
# Parser
# =============================================================================

TokenSource = Union[CalcLexer, Iterable[CalcToken]]


class CalcParser:
    """
    Recursive descent parser for the calculator language.

    Parses a token stream into a ProgramNode. The token source is either a
    CalcLexer (tokens are pulled with next_token()) or any iterable of
    tokens. Tokens are read strictly left to right, one lookahead at a
    time.

    Attributes:
        filename: Source filename for error reporting
        source_lines: Original source lines for error context
        errors: Collector receiving every syntax error
    """

    def __init__(
        self,
        tokens: TokenSource,
        filename: str = "<input>",
        source_lines: Optional[list[str]] = None,
        errors: Optional[ErrorCollector] = None,
    ):
        """
        Initialize the parser.

        Args:
            tokens: A CalcLexer or an iterable of tokens
            filename: Source filename for error messages
            source_lines: Original source lines for error context
            errors: Collector to record syntax errors into
        """
        if isinstance(tokens, CalcLexer):
            self._next_token = tokens.next_token
        else:
            stream = iter(tokens)
            self._next_token = lambda: next(stream, None)

        self.filename = filename
        self.source_lines = source_lines or []
        self.errors = errors if errors is not None else ErrorCollector()

        # Current lookahead token
        self._lookahead: Optional[CalcToken] = None

        # Set once any recoverable error has been reported
        self.had_error = False

        # Location of the last reported error; a token is reported only once
        self._last_error_location: Optional[SourceLocation] = None

    # =========================================================================
    # Entry Points
    # =========================================================================

    def parse_program(self) -> tuple[ProgramNode, bool]:
        """
        Parse a whole program.

        Returns:
            The program node and the error flag. The tree is complete when
            the flag is False and best-effort otherwise.

        Raises:
            LexicalError: If the lexer hits a fatal error
        """
        self._prime()
        logger.debug("predict program --> stmt_list eof")

        statements = self.parse_stmt_list(frozenset({T.EOF}))

        program = ProgramNode(
            location=SourceLocation(self.filename, 1, 1),
            statements=statements,
        )
        return program, self.had_error

    def parse_relation(self, follow: Optional[TokenSet] = None) -> Optional[Expression]:
        """
        Parse a relation: expr, optionally followed by a relation operator and expr.

        Args:
            follow: Tokens that may follow the relation here; defaults to
                    the global FOLLOW(relation)

        Returns:
            The expression tree, or None if no operand could be parsed
        """
        if follow is None:
            follow = FOLLOW[Nonterminal.RELATION]
        self._prime()
        logger.debug("predict relation --> expr expr_tail")

        root = self._new_root()
        self._attach(root, self._parse_expr(follow | RELATION_OPERATORS, in_relation=True))
        self._parse_expr_tail(root, follow)
        return collapse(root)

    # =========================================================================
    # Token Access Methods
    # =========================================================================

    def _prime(self) -> None:
        """Fetch the first lookahead token if none has been read yet."""
        if self._lookahead is None:
            self._lookahead = self._fetch()

    def _fetch(self) -> CalcToken:
        token = self._next_token()
        if token is None:
            # Iterable ran dry without an EOF token; keep returning EOF
            if self._lookahead is not None and self._lookahead.type == T.EOF:
                return self._lookahead
            line = self._lookahead.line if self._lookahead else 1
            return CalcToken(T.EOF, "", line, 0, self.filename)
        return token

    def _peek(self) -> CalcToken:
        return self._lookahead

    def _check(self, *types: T) -> bool:
        """Check if the lookahead is one of the given types."""
        return self._lookahead.type in types

    def _advance(self) -> CalcToken:
        """Consume and return the lookahead; EOF is never consumed."""
        token = self._lookahead
        if token.type != T.EOF:
            self._lookahead = self._fetch()
        return token

    def _expect(
        self,
        token_type: T,
        error_class: type[ParseError],
        context: Nonterminal,
    ) -> CalcToken:
        """
        Match and consume a specific terminal.

        Raises:
            ParseError: error_class, if the lookahead is something else
        """
        if self._check(token_type):
            token = self._advance()
            if token_type in (T.ID, T.LITERAL):
                logger.debug(f"matched {token_type.name.lower()}: {token.lexeme}")
            else:
                logger.debug(f"matched {token_type.name.lower()}")
            return token

        raise self._error(error_class, context, frozenset({token_type}))

    def _get_source_line(self, line: int) -> Optional[str]:
        if 0 < line <= len(self.source_lines):
            return self.source_lines[line - 1]
        return None

    # =========================================================================
    # Error Reporting and Recovery
    # =========================================================================

    def _error(
        self,
        error_class: type[ParseError],
        context: Nonterminal,
        expected: TokenSet,
    ) -> ParseError:
        """Build an error describing the current lookahead."""
        token = self._peek()
        return error_class(
            token.display,
            context.value,
            expected=describe(expected),
            location=token.location,
            source_line=self._get_source_line(token.line),
        )

    def _report(self, error: ParseError) -> None:
        """
        Record an error and raise the error flag.

        A token that stops several recovery levels in a row (a restart
        token such as '(') is reported by the first of them only.
        """
        self.had_error = True
        if error.location == self._last_error_location:
            logger.debug(f"suppressing repeated {error.kind} at {error.location}")
            return
        self._last_error_location = error.location
        self.errors.add(error)
        logger.debug(f"{error.kind} at line {error.location.line}: {error.message}")

    def _discard(self) -> None:
        token = self._advance()
        logger.debug(f"discarding {token.display!r} (line {token.line})")

    def _skip_until(self, stop: TokenSet) -> None:
        """Discard tokens until the lookahead is in stop or is EOF."""
        while not self._check(T.EOF) and self._peek().type not in stop:
            self._discard()

    def check_for_error(
        self,
        nonterminal: Nonterminal,
        follow: TokenSet,
        error_class: type[ParseError],
    ) -> None:
        """
        Resynchronize before dispatching on a tail nonterminal.

        Nothing happens if the lookahead can start the nonterminal, or can
        follow it here and the nonterminal may be empty. Otherwise the
        error is reported and tokens are discarded until the lookahead is
        in FIRST(nonterminal), the inherited follow set, the restart
        tokens, or is EOF. Every discarded token is consumed, so this
        always terminates.
        """
        first = FIRST[nonterminal]
        lookahead = self._peek().type
        if lookahead in first:
            return
        if nonterminal in NULLABLE and lookahead in follow:
            return

        self._report(self._error(error_class, nonterminal, first | follow))
        self._skip_until(first | follow | RESTART_TOKENS)

    # =========================================================================
    # Statement Parsing
    # =========================================================================

    def parse_stmt_list(self, follow: TokenSet) -> list[Statement]:
        """
        Parse statements until the lookahead can end the list.

        Args:
            follow: Tokens that may follow this list (fi, od, eof, plus
                    whatever the enclosing constructs inherited)
        """
        statements: list[Statement] = []

        while True:
            self.check_for_error(Nonterminal.STMT_LIST, follow, StatementListError)

            # A restart token that cannot start a statement ('(') has been
            # reported; drop it and stay in this list
            if self._peek().type in (RESTART_TOKENS - STATEMENT_STARTERS) - follow:
                self._discard()
                continue

            if not self._check(*STATEMENT_STARTERS):
                logger.debug("predict stmt_list --> epsilon")
                return statements

            logger.debug("predict stmt_list --> stmt stmt_list")
            stmt = self.parse_stmt(follow | STATEMENT_STARTERS)
            if stmt is not None:
                statements.append(stmt)

    def parse_stmt(self, follow: TokenSet) -> Optional[Statement]:
        """
        Parse one statement, selected by the lookahead token.

        On a StatementError the tokens up to the next statement start or
        follow token are discarded and the partially built statement is
        returned.

        Args:
            follow: Tokens that may follow this statement
        """
        token = self._peek()
        location = token.location
        stmt: Optional[Statement] = None

        try:
            if token.type == T.ID:
                logger.debug("predict stmt --> id gets expr")
                stmt = AssignStatement(location=location, name=token.lexeme)
                self._expect(T.ID, StatementError, Nonterminal.STMT)
                self._expect(T.ASSIGN, StatementError, Nonterminal.STMT)
                stmt.expression = self._parse_expr(follow)

            elif token.type == T.READ:
                logger.debug("predict stmt --> read id")
                stmt = ReadStatement(location=location)
                self._expect(T.READ, StatementError, Nonterminal.STMT)
                stmt.name = self._expect(T.ID, StatementError, Nonterminal.STMT).lexeme

            elif token.type == T.WRITE:
                logger.debug("predict stmt --> write relation")
                stmt = WriteStatement(location=location)
                self._expect(T.WRITE, StatementError, Nonterminal.STMT)
                stmt.expression = self.parse_relation(follow)

            elif token.type == T.IF:
                logger.debug("predict stmt --> if relation stmt_list fi")
                stmt = IfStatement(location=location)
                self._expect(T.IF, StatementError, Nonterminal.STMT)
                stmt.condition = self.parse_relation(follow | STATEMENT_STARTERS | {T.FI})
                stmt.body = self.parse_stmt_list(follow | {T.FI})
                self._expect(T.FI, StatementError, Nonterminal.STMT)

            elif token.type == T.DO:
                logger.debug("predict stmt --> do stmt_list od")
                stmt = DoStatement(location=location)
                self._expect(T.DO, StatementError, Nonterminal.STMT)
                stmt.body = self.parse_stmt_list(follow | {T.OD})
                self._expect(T.OD, StatementError, Nonterminal.STMT)

            elif token.type == T.CHECK:
                logger.debug("predict stmt --> check relation")
                stmt = CheckStatement(location=location)
                self._expect(T.CHECK, StatementError, Nonterminal.STMT)
                stmt.condition = self.parse_relation(follow)

            else:
                raise self._error(StatementError, Nonterminal.STMT, STATEMENT_STARTERS)

        except StatementError as error:
            self._report(error)
            self._skip_until(STATEMENT_STARTERS | follow)

        return stmt

    # =========================================================================
    # Expression Parsing
    # =========================================================================

    def _new_root(self) -> BinaryExpression:
        return BinaryExpression(location=self._peek().location)

    def _attach(self, root: BinaryExpression, operand: Optional[Expression]) -> None:
        if operand is None:
            return
        if not attach_operand(root, operand):
            logger.debug(f"dropping operand at line {operand.location.line}: no free slot")

    def _insert(self, root: BinaryExpression) -> None:
        """Consume the operator token in the lookahead and insert it at root's level."""
        token = self._advance()
        logger.debug(f"matched operator: {token.lexeme}")
        insert_operator(root, TOKEN_OPERATORS[token.type], token.location)

    def _parse_expr_tail(self, root: BinaryExpression, follow: TokenSet) -> None:
        self.check_for_error(Nonterminal.EXPR_TAIL, follow, RelationError)

        if self._check(*RELATION_OPERATORS):
            logger.debug("predict expr_tail --> relation_op expr")
            self._insert(root)
            self._attach(root, self._parse_expr(follow))
        else:
            logger.debug("predict expr_tail --> epsilon")

    def _parse_expr(self, follow: TokenSet, in_relation: bool = False) -> Optional[Expression]:
        """
        Parse an expr.

        in_relation is set for the left operand of a relation. Its tails
        then end on any token that is not one of their operators and leave
        the diagnosis to expr_tail.
        """
        logger.debug("predict expr --> term term_tail")
        root = self._new_root()
        self._attach(root, self._parse_term(follow | ADD_OPERATORS, in_relation))
        self._parse_term_tail(root, follow, in_relation)
        return collapse(root)

    def _parse_term_tail(
        self,
        root: BinaryExpression,
        follow: TokenSet,
        in_relation: bool = False,
    ) -> None:
        while True:
            if not in_relation:
                self.check_for_error(Nonterminal.TERM_TAIL, follow, ExpressionError)

            if not self._check(*ADD_OPERATORS):
                logger.debug("predict term_tail --> epsilon")
                return

            logger.debug("predict term_tail --> add_op term term_tail")
            self._insert(root)
            self._attach(root, self._parse_term(follow | ADD_OPERATORS, in_relation))

    def _parse_term(self, follow: TokenSet, in_relation: bool = False) -> Optional[Expression]:
        logger.debug("predict term --> factor factor_tail")
        root = self._new_root()
        self._parse_factor(root, follow | MUL_OPERATORS)
        self._parse_factor_tail(root, follow, in_relation)
        return collapse(root)

    def _parse_factor_tail(
        self,
        root: BinaryExpression,
        follow: TokenSet,
        in_relation: bool = False,
    ) -> None:
        while True:
            if not in_relation:
                self.check_for_error(Nonterminal.FACTOR_TAIL, follow, ExpressionError)

            if not self._check(*MUL_OPERATORS):
                logger.debug("predict factor_tail --> epsilon")
                return

            logger.debug("predict factor_tail --> mul_op factor factor_tail")
            self._insert(root)
            self._parse_factor(root, follow | MUL_OPERATORS)

    def _parse_factor(self, root: BinaryExpression, follow: TokenSet) -> None:
        """
        Parse a factor and attach it to the term level owned by root.

        On an ExpressionError, tokens are discarded until one can start an
        expression (the factor is retried) or can follow it here (the
        partial tree is left as it is). A missing ')' is handled where it
        is matched and never leads to a retry.
        """
        while True:
            try:
                self._factor(root, follow)
                return
            except ExpressionError as error:
                self._report(error)
                self._skip_until(EXPRESSION_STARTERS | follow)
                if not self._check(*EXPRESSION_STARTERS):
                    return
                logger.debug("retrying factor")

    def _factor(self, root: BinaryExpression, follow: TokenSet) -> None:
        token = self._peek()

        if token.type == T.ID:
            logger.debug("predict factor --> id")
            self._expect(T.ID, ExpressionError, Nonterminal.FACTOR)
            self._attach(root, IdentifierExpression(location=token.location, name=token.lexeme))

        elif token.type == T.LITERAL:
            logger.debug("predict factor --> literal")
            self._expect(T.LITERAL, ExpressionError, Nonterminal.FACTOR)
            self._attach(root, NumberLiteral(location=token.location, text=token.lexeme))

        elif token.type == T.LPAREN:
            logger.debug("predict factor --> lparen relation rparen")
            self._expect(T.LPAREN, ExpressionError, Nonterminal.FACTOR)
            self._attach(root, self.parse_relation(follow | {T.RPAREN}))
            try:
                self._expect(T.RPAREN, ExpressionError, Nonterminal.FACTOR)
            except ExpressionError as error:
                # The parenthesised relation is already attached, so the
                # factor is finished; it must not be retried
                self._report(error)
                self._skip_until(follow | RESTART_TOKENS)

        else:
            raise self._error(ExpressionError, Nonterminal.FACTOR, EXPRESSION_STARTERS)


# =============================================================================
# Convenience Functions
# =============================================================================

def parse_source(
    source: str,
    filename: str = "<input>",
    errors: Optional[ErrorCollector] = None,
) -> tuple[ProgramNode, bool]:
    """
    Parse calculator language source into an AST.

    Combines lexing and parsing; tokens are pulled from the lexer on demand.

    Args:
        source: The program text
        filename: Source filename for error messages
        errors: Collector for lexer and parser diagnostics

    Returns:
        The program node and the error flag

    Raises:
        LexicalError: If the lexer hits a fatal error
    """
    errors = errors if errors is not None else ErrorCollector()
    lexer = CalcLexer(source, filename, errors=errors)
    parser = CalcParser(lexer, filename, source.splitlines(), errors=errors)
    return parser.parse_program()
