"""
C Code Generator for the Calculator Language
============================================

This module translates a calculator language AST into a single C
translation unit that can be built with any C compiler.

Translation
-----------
| Calculator            | C                                   |
|-----------------------|-------------------------------------|
| x := e                | x = e;                              |
| read x                | scanf("%d", &x);                    |
| write e               | printf("%d\\n",e);                   |
| if e ... fi           | if (e) { ... }                      |
| do ... od             | while(1) { ... }                    |
| check e               | if (!(e)) { break; }                |

Every variable that is assigned or read anywhere in the program becomes
an `int` local of main(), declared once, in sorted order.

Output Layout
-------------
    #include <stdio.h>

    int main() {
    int n;
    scanf("%d", &n);

    printf("%d\\n", (n*2));

    return 0;
    }

Each statement is followed by a blank line. Expressions are written infix
and every binary node is parenthesised as " (<left><op><right>)".

Recovery Trees
--------------
The generator always runs, even after syntax errors. A missing operand is
written as 0, and a binary node that never got its operator is written as
its left operand; both cases add a warning to the collector.
"""

from typing import Optional
import logging

from calclang.calc.ast import (
    ASTVisitor,
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
)
from calclang.calc.errors import ErrorCollector

logger = logging.getLogger(__name__)


# Operators whose C spelling differs from the calculator language
C_OPERATORS: dict[BinaryOperator, str] = {
    BinaryOperator.NOT_EQUAL: "!=",
}


class VariableCollector(ASTVisitor):
    """Collects the targets of assignments and read statements, at any depth."""

    def __init__(self):
        self.names: set[str] = set()

    def visit_AssignStatement(self, node: AssignStatement):
        self.names.add(node.name)

    def visit_ReadStatement(self, node: ReadStatement):
        self.names.add(node.name)

    def visit_IfStatement(self, node: IfStatement):
        self.visit_statements(node.body)

    def visit_WriteStatement(self, node):
        pass

    def visit_CheckStatement(self, node):
        pass


class CodeGenerator(ASTVisitor):
    """
    Generates C source from a calculator language AST.

    Attributes:
        errors: Collector receiving warnings about incomplete trees
    """

    def __init__(self, errors: Optional[ErrorCollector] = None):
        """
        Initialize the code generator.

        Args:
            errors: Collector for warnings (a private one is used if None)
        """
        self.errors = errors if errors is not None else ErrorCollector()

        # Output fragments, joined at the end
        self._output: list[str] = []

        # Declared variables (sorted when emitted)
        self._variables: list[str] = []

    def generate(self, program: ProgramNode) -> str:
        """
        Generate C code from the AST.

        Args:
            program: The root AST node

        Returns:
            Complete C source text
        """
        self._output = []

        collector = VariableCollector()
        collector.visit(program)
        self._variables = sorted(collector.names)

        self._emit("#include <stdio.h>\n\n")
        self._emit("int main() {\n")
        for name in self._variables:
            self._emit(f"int {name};\n")

        self.visit_statements(program.statements)

        self._emit("\nreturn 0;")
        self._emit("\n}")

        logger.debug(
            f"Generated C: {len(self._variables)} variables, "
            f"{len(program.statements)} top-level statements"
        )
        return "".join(self._output)

    @property
    def variables(self) -> list[str]:
        """Variables declared by the last generate() call."""
        return list(self._variables)

    # =========================================================================
    # Output Methods
    # =========================================================================

    def _emit(self, text: str) -> None:
        self._output.append(text)

    def _warn(self, message: str, node: Expression) -> None:
        self.errors.add_warning(message, node.location)
        logger.debug(f"codegen: {message} at {node.location}")

    # =========================================================================
    # Statements
    # =========================================================================

    def visit_statements(self, statements: list[Statement]) -> None:
        for stmt in statements:
            self.visit(stmt)
            self._emit("\n")

    def visit_AssignStatement(self, node: AssignStatement):
        self._emit(f"{node.name} = ")
        self._expression(node.expression)
        self._emit(";\n")

    def visit_ReadStatement(self, node: ReadStatement):
        self._emit(f'scanf("%d", &{node.name});\n')

    def visit_WriteStatement(self, node: WriteStatement):
        self._emit('printf("%d\\n",')
        self._expression(node.expression)
        self._emit(");\n")

    def visit_DoStatement(self, node: DoStatement):
        self._emit("while(1) {\n")
        self.visit_statements(node.body)
        self._emit("}\n")

    def visit_IfStatement(self, node: IfStatement):
        self._emit("if (")
        self._expression(node.condition)
        self._emit(") {\n")
        self.visit_statements(node.body)
        self._emit("}\n")

    def visit_CheckStatement(self, node: CheckStatement):
        self._emit("if (!(")
        self._expression(node.condition)
        self._emit(")) {\n")
        self._emit("break;\n}\n")

    # =========================================================================
    # Expressions
    # =========================================================================

    def _expression(self, expr: Optional[Expression]) -> None:
        """Emit an expression in infix form."""
        if expr is None:
            self._emit("0")
            return

        if isinstance(expr, IdentifierExpression):
            self._emit(expr.name)
            return

        if isinstance(expr, NumberLiteral):
            self._emit(expr.text)
            return

        if isinstance(expr, BinaryExpression):
            self._binary(expr)
            return

        raise TypeError(f"cannot generate code for {type(expr).__name__}")

    def _binary(self, expr: BinaryExpression) -> None:
        if expr.operator is None:
            self._warn("expression without operator; using its left operand", expr)
            self._expression(expr.left)
            return

        if expr.left is None or expr.right is None:
            self._warn(f"missing operand of '{expr.operator.symbol}' emitted as 0", expr)

        self._emit(" (")
        self._expression(expr.left)
        self._emit(C_OPERATORS.get(expr.operator, expr.operator.symbol))
        self._expression(expr.right)
        self._emit(")")


def generate_c(program: ProgramNode) -> str:
    """Convenience wrapper: generate C code for a program."""
    return CodeGenerator().generate(program)
