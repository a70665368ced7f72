"""
Calculator Language Abstract Syntax Tree (AST) Definitions
==========================================================

This module defines the AST node types built by the calculator language
parser and consumed by the printer, the loop checks and the C code
generator.

Node Hierarchy
--------------
ASTNode (base)
├── ProgramNode - root node holding the top-level statement list
├── Statements
│   ├── AssignStatement - name := expression
│   ├── ReadStatement - read name
│   ├── WriteStatement - write relation
│   ├── IfStatement - if relation body fi
│   ├── DoStatement - do body od
│   └── CheckStatement - check relation (loop break)
└── Expressions
    ├── BinaryExpression - binary operator node
    ├── IdentifierExpression - variable reference
    └── NumberLiteral - integer constant

Design Notes
------------
- All nodes are dataclasses; each stores its source location.
- A statement list is a plain Python list of Statement nodes. Order is
  execution order and an empty list is a valid body.
- BinaryExpression children may be None while the parser is still
  building the node, and on the error-recovery path. A tree produced by
  an error-free parse is always complete (see Expression.is_complete).
- The tree is never modified once the parser hands it over.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from calclang.errors import SourceLocation
from calclang.calc.lexer import CalcTokenType


# =============================================================================
# AST Node Base Classes
# =============================================================================

@dataclass
class ASTNode:
    """
    Base class for all AST nodes.

    Attributes:
        location: Source location where this node appears
    """
    location: SourceLocation

    def __repr__(self) -> str:
        """Default representation showing node type."""
        return f"{self.__class__.__name__}@{self.location.line}:{self.location.column}"


@dataclass
class Expression(ASTNode):
    """Base class for all expression nodes."""

    def is_complete(self) -> bool:
        """True if every binary node below (and including) this one has both children."""
        return True


@dataclass
class Statement(ASTNode):
    """Base class for all statement nodes."""
    pass


# =============================================================================
# Program Root Node
# =============================================================================

@dataclass
class ProgramNode(ASTNode):
    """
    Root node of the AST representing a complete program.

    Attributes:
        statements: The top-level statement list
    """
    statements: list[Statement] = field(default_factory=list)


# =============================================================================
# Statement Nodes
# =============================================================================

@dataclass
class AssignStatement(Statement):
    """
    Assignment statement (name := expression).

    Attributes:
        name: Target variable
        expression: Value assigned (None only after a syntax error)
    """
    name: str = ""
    expression: Optional[Expression] = None


@dataclass
class ReadStatement(Statement):
    """Input statement (read name)."""
    name: str = ""


@dataclass
class WriteStatement(Statement):
    """Output statement (write relation)."""
    expression: Optional[Expression] = None


@dataclass
class IfStatement(Statement):
    """
    Conditional statement (if relation stmt_list fi).

    There is no else branch in the language.

    Attributes:
        condition: The relation tested
        body: Statements executed when the condition holds
    """
    condition: Optional[Expression] = None
    body: list[Statement] = field(default_factory=list)


@dataclass
class DoStatement(Statement):
    """
    Loop statement (do stmt_list od).

    The loop runs until one of the check statements directly in its body
    finds its condition false.
    """
    body: list[Statement] = field(default_factory=list)


@dataclass
class CheckStatement(Statement):
    """Loop break (check relation): leave the loop when the relation is false."""
    condition: Optional[Expression] = None


# =============================================================================
# Expression Nodes
# =============================================================================

class BinaryOperator(Enum):
    """Binary operator types, valued by their source spelling."""
    # Arithmetic
    ADD = "+"
    SUBTRACT = "-"
    MULTIPLY = "*"
    DIVIDE = "/"

    # Relational
    EQUAL = "=="
    NOT_EQUAL = "<>"
    LESS = "<"
    GREATER = ">"
    LESS_EQ = "<="
    GREATER_EQ = ">="

    @property
    def symbol(self) -> str:
        return self.value

    @property
    def is_relational(self) -> bool:
        return self in _RELATIONAL_OPERATORS


_RELATIONAL_OPERATORS = frozenset({
    BinaryOperator.EQUAL,
    BinaryOperator.NOT_EQUAL,
    BinaryOperator.LESS,
    BinaryOperator.GREATER,
    BinaryOperator.LESS_EQ,
    BinaryOperator.GREATER_EQ,
})

# Token type to operator, for every operator token the parser accepts
TOKEN_OPERATORS: dict[CalcTokenType, BinaryOperator] = {
    CalcTokenType.ADD: BinaryOperator.ADD,
    CalcTokenType.SUB: BinaryOperator.SUBTRACT,
    CalcTokenType.MUL: BinaryOperator.MULTIPLY,
    CalcTokenType.DIV: BinaryOperator.DIVIDE,
    CalcTokenType.EQ: BinaryOperator.EQUAL,
    CalcTokenType.NOTEQ: BinaryOperator.NOT_EQUAL,
    CalcTokenType.LT: BinaryOperator.LESS,
    CalcTokenType.GT: BinaryOperator.GREATER,
    CalcTokenType.LTE: BinaryOperator.LESS_EQ,
    CalcTokenType.GTE: BinaryOperator.GREATER_EQ,
}


@dataclass
class BinaryExpression(Expression):
    """
    Binary operation expression (left op right).

    A node whose operator is still None is a "level root" that has not
    seen an operator yet; the parser collapses such nodes before
    returning them.

    Attributes:
        operator: The binary operator
        left: Left operand expression
        right: Right operand expression
    """
    operator: Optional[BinaryOperator] = None
    left: Optional[Expression] = None
    right: Optional[Expression] = None

    def is_complete(self) -> bool:
        if self.operator is None or self.left is None or self.right is None:
            return False
        return self.left.is_complete() and self.right.is_complete()


@dataclass
class IdentifierExpression(Expression):
    """Variable reference."""
    name: str = ""


@dataclass
class NumberLiteral(Expression):
    """
    Integer constant.

    The text is kept exactly as written ("007" stays "007").
    """
    text: str = ""


# =============================================================================
# AST Visitor Pattern
# =============================================================================

class ASTVisitor:
    """
    Base class for AST visitors.

    Subclasses override visit_* methods for the node types they care
    about; everything else falls through to generic_visit, which visits
    the node's children.

    Usage:
        class LoopCounter(ASTVisitor):
            def __init__(self):
                self.loops = 0

            def visit_DoStatement(self, node):
                self.loops += 1
                self.generic_visit(node)
    """

    def visit(self, node: ASTNode):
        """Visit a node by dispatching to the matching visit_* method."""
        method_name = f"visit_{node.__class__.__name__}"
        visitor = getattr(self, method_name, self.generic_visit)
        return visitor(node)

    def generic_visit(self, node: ASTNode) -> None:
        """Visit all child nodes (fields holding nodes or lists of nodes)."""
        for field_value in node.__dict__.values():
            if isinstance(field_value, ASTNode):
                self.visit(field_value)
            elif isinstance(field_value, list):
                for item in field_value:
                    if isinstance(item, ASTNode):
                        self.visit(item)

    def visit_statements(self, statements: list[Statement]) -> None:
        """Visit every statement of a statement list in order."""
        for stmt in statements:
            self.visit(stmt)


# =============================================================================
# AST Printer
# =============================================================================

class ASTPrinter(ASTVisitor):
    """
    Parenthesized prefix dump of a program.

    The layout (brackets, quotes, spaces and line breaks) is fixed, since
    other tools compare the dump textually:

        (program
        [ (:= "x" (+ (id "a") (num "1")))
        ]
        )

    Usage:
        printer = ASTPrinter()
        text = printer.print(program)
    """

    def __init__(self):
        self.output: list[str] = []

    def print(self, node: ASTNode) -> str:
        """Print the AST and return it as a string."""
        self.output = []
        self.visit(node)
        return "".join(self.output)

    def _emit(self, text: str) -> None:
        self.output.append(text)

    def visit_ProgramNode(self, node: ProgramNode):
        self._emit("(program\n")
        self._emit("[ ")
        self.visit_statements(node.statements)
        self._emit("] ")
        self._emit("\n) ")

    def visit_AssignStatement(self, node: AssignStatement):
        self._emit(f'(:= "{node.name}"')
        self._expression(node.expression)
        self._emit(")\n")

    def visit_ReadStatement(self, node: ReadStatement):
        self._emit(f'(read "{node.name}"')
        self._emit(")\n")

    def visit_WriteStatement(self, node: WriteStatement):
        self._emit("(write ")
        self._expression(node.expression)
        self._emit(")\n")

    def visit_IfStatement(self, node: IfStatement):
        self._emit("(if \n")
        self._expression(node.condition)
        self._body(node.body)
        self._emit(")\n")

    def visit_DoStatement(self, node: DoStatement):
        self._emit("(do\n")
        self._body(node.body)
        self._emit(")\n")

    def visit_CheckStatement(self, node: CheckStatement):
        self._emit("(check ")
        self._expression(node.condition)
        self._emit(")\n")

    def _body(self, statements: list[Statement]) -> None:
        self._emit("[\n")
        self.visit_statements(statements)
        self._emit("]\n")

    def _expression(self, expr: Optional[Expression]) -> None:
        """Prefix form; only nodes with both children get their own parentheses."""
        if expr is None:
            return

        if isinstance(expr, IdentifierExpression):
            self._emit(f'(id "{expr.name}")')
            return
        if isinstance(expr, NumberLiteral):
            self._emit(f'(num "{expr.text}")')
            return

        if isinstance(expr, BinaryExpression):
            closed = expr.left is not None and expr.right is not None
            if closed:
                self._emit(" (")
            self._emit(expr.operator.symbol if expr.operator else "?")
            if expr.left is not None:
                self._emit(" ")
                self._expression(expr.left)
            if expr.right is not None:
                self._emit(" ")
                self._expression(expr.right)
            if closed:
                self._emit(")")
            return

        self._emit(f"<{type(expr).__name__}>")
