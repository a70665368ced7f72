"""
Calculator Language Grammar Tables
==================================

Static FIRST and FOLLOW sets for the calculator language grammar, plus
the restart tokens used by panic-mode recovery.

These tables are used only to diagnose and recover from syntax errors.
The parser never consults them to choose a production: production
selection is done by direct one-token lookahead in each parse method.

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

The FOLLOW sets below are the global ones. At run time the parser threads
a context-specific ("inherited") FOLLOW set down each call instead, which
is what lets recovery stop inside a nested if/do body rather than at the
outermost statement list. A relation parsed on its own, with no enclosing
context, uses FOLLOW(relation).
"""

from enum import Enum

from calclang.calc.lexer import CalcTokenType as T

TokenSet = frozenset[T]


class Nonterminal(Enum):
    """Grammar nonterminals, valued by their name in diagnostics."""
    PROGRAM = "program"
    STMT_LIST = "stmt_list"
    STMT = "stmt"
    RELATION = "relation"
    EXPR_TAIL = "expr_tail"
    EXPR = "expr"
    TERM_TAIL = "term_tail"
    TERM = "term"
    FACTOR_TAIL = "factor_tail"
    FACTOR = "factor"


# =============================================================================
# Terminal Groups
# =============================================================================

RELATION_OPERATORS: TokenSet = frozenset({T.EQ, T.NOTEQ, T.LT, T.GT, T.LTE, T.GTE})
ADD_OPERATORS: TokenSet = frozenset({T.ADD, T.SUB})
MUL_OPERATORS: TokenSet = frozenset({T.MUL, T.DIV})

# Tokens that may begin a statement
STATEMENT_STARTERS: TokenSet = frozenset({T.ID, T.READ, T.WRITE, T.IF, T.DO, T.CHECK})

# Tokens that may begin an expression (relation, expr, term or factor)
EXPRESSION_STARTERS: TokenSet = frozenset({T.ID, T.LITERAL, T.LPAREN})

# Tokens that end a statement list
STATEMENT_LIST_ENDERS: TokenSet = frozenset({T.EOF, T.FI, T.OD})

# Recovery always stops at these, whatever the context
RESTART_TOKENS: TokenSet = frozenset({T.LPAREN, T.IF, T.DO})


# =============================================================================
# FIRST Sets
# =============================================================================

# Tail nonterminals derive ε; their FIRST sets list only the non-empty starts.
FIRST: dict[Nonterminal, TokenSet] = {
    Nonterminal.PROGRAM: STATEMENT_STARTERS | {T.EOF},
    Nonterminal.STMT_LIST: STATEMENT_STARTERS,
    Nonterminal.STMT: STATEMENT_STARTERS,
    Nonterminal.RELATION: EXPRESSION_STARTERS,
    Nonterminal.EXPR_TAIL: RELATION_OPERATORS,
    Nonterminal.EXPR: EXPRESSION_STARTERS,
    Nonterminal.TERM_TAIL: ADD_OPERATORS,
    Nonterminal.TERM: EXPRESSION_STARTERS,
    Nonterminal.FACTOR_TAIL: MUL_OPERATORS,
    Nonterminal.FACTOR: EXPRESSION_STARTERS,
}

NULLABLE: frozenset[Nonterminal] = frozenset({
    Nonterminal.STMT_LIST,
    Nonterminal.EXPR_TAIL,
    Nonterminal.TERM_TAIL,
    Nonterminal.FACTOR_TAIL,
})


# =============================================================================
# Global FOLLOW Sets
# =============================================================================

_FOLLOW_STMT = STATEMENT_STARTERS | STATEMENT_LIST_ENDERS
_FOLLOW_RELATION = _FOLLOW_STMT | {T.RPAREN}
_FOLLOW_EXPR = _FOLLOW_RELATION | RELATION_OPERATORS
_FOLLOW_TERM = _FOLLOW_EXPR | ADD_OPERATORS
_FOLLOW_FACTOR = _FOLLOW_TERM | MUL_OPERATORS

FOLLOW: dict[Nonterminal, TokenSet] = {
    Nonterminal.PROGRAM: frozenset(),
    Nonterminal.STMT_LIST: STATEMENT_LIST_ENDERS,
    Nonterminal.STMT: _FOLLOW_STMT,
    Nonterminal.RELATION: _FOLLOW_RELATION,
    Nonterminal.EXPR_TAIL: _FOLLOW_RELATION,
    Nonterminal.EXPR: _FOLLOW_EXPR,
    Nonterminal.TERM_TAIL: _FOLLOW_EXPR,
    Nonterminal.TERM: _FOLLOW_TERM,
    Nonterminal.FACTOR_TAIL: _FOLLOW_TERM,
    Nonterminal.FACTOR: _FOLLOW_FACTOR,
}


# =============================================================================
# Diagnostics
# =============================================================================

SPELLINGS: dict[T, str] = {
    T.READ: "'read'",
    T.WRITE: "'write'",
    T.ID: "identifier",
    T.LITERAL: "literal",
    T.ASSIGN: "':='",
    T.ADD: "'+'",
    T.SUB: "'-'",
    T.MUL: "'*'",
    T.DIV: "'/'",
    T.LPAREN: "'('",
    T.RPAREN: "')'",
    T.EOF: "end of file",
    T.IF: "'if'",
    T.FI: "'fi'",
    T.DO: "'do'",
    T.OD: "'od'",
    T.CHECK: "'check'",
    T.EQ: "'=='",
    T.NOTEQ: "'<>'",
    T.LT: "'<'",
    T.GT: "'>'",
    T.LTE: "'<='",
    T.GTE: "'>='",
}


def describe(tokens: TokenSet) -> str:
    """Readable, stable listing of a token set for hints."""
    names = [SPELLINGS.get(token, token.name.lower()) for token in sorted(tokens, key=lambda t: t.value)]
    if len(names) == 1:
        return names[0]
    return "one of " + ", ".join(names)
