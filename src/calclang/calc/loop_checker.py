"""
Loop Structure Checks
=====================

This module validates how 'do' loops and 'check' statements fit together
in a calculator language program. A 'do' loop only ends through a 'check'
that sits directly in its body, and a 'check' outside a loop body has no
loop to leave.

Two read-only walks over the AST are provided:

1. **do-has-check**: every 'do' loop, numbered 1, 2, ... in pre-order, is
   reported as having or not having a 'check' among the immediate
   statements of its body. Checks nested in an inner 'if' or 'do' do not
   count.
2. **check-in-do**: every 'check', numbered 1, 2, ... in pre-order, is
   reported as being or not being directly in a 'do' body. A check in an
   'if' body (even one inside a loop) or at program level is not in a do.

Numbering starts again at 1 on every run.

Usage
-----
>>> from calclang.calc.loop_checker import LoopChecker
>>> checker = LoopChecker()
>>> report = checker.check(program)
>>> for line in report.lines():
...     print(line)
do [1] has check in it
check [1] is in do

Both walks run whatever the parser's error flag says; on a best-effort
tree they simply report what is there.
"""

from dataclasses import dataclass, field
import logging

from calclang.errors import SourceLocation
from calclang.calc.ast import (
    ASTVisitor,
    ProgramNode,
    Statement,
    IfStatement,
    DoStatement,
    CheckStatement,
)

logger = logging.getLogger(__name__)


# =============================================================================
# Findings
# =============================================================================

@dataclass
class LoopFinding:
    """
    Result for a single 'do' loop.

    Attributes:
        index: Pre-order loop number (1-based)
        has_check: True if a check is an immediate element of the body
        location: Where the loop starts
    """
    index: int
    has_check: bool
    location: SourceLocation

    def __str__(self) -> str:
        if self.has_check:
            return f"do [{self.index}] has check in it"
        return f"do [{self.index}] has no check in it"


@dataclass
class CheckFinding:
    """
    Result for a single 'check' statement.

    Attributes:
        index: Pre-order check number (1-based)
        in_do: True if the enclosing statement list is a do body
        location: Where the check appears
    """
    index: int
    in_do: bool
    location: SourceLocation

    def __str__(self) -> str:
        if self.in_do:
            return f"check [{self.index}] is in do"
        return f"check [{self.index}] not in do"


@dataclass
class LoopReport:
    """Combined result of both loop checks."""
    loops: list[LoopFinding] = field(default_factory=list)
    checks: list[CheckFinding] = field(default_factory=list)

    @property
    def all_loops_have_check(self) -> bool:
        return all(finding.has_check for finding in self.loops)

    @property
    def all_checks_in_do(self) -> bool:
        return all(finding.in_do for finding in self.checks)

    @property
    def ok(self) -> bool:
        """True if every loop can end and every check has a loop to leave."""
        return self.all_loops_have_check and self.all_checks_in_do

    def lines(self) -> list[str]:
        """Loop lines first, then check lines, each in pre-order."""
        return [str(f) for f in self.loops] + [str(f) for f in self.checks]


# =============================================================================
# Walkers
# =============================================================================

class DoHasCheckVisitor(ASTVisitor):
    """Numbers 'do' loops in pre-order and records whether each has a direct check."""

    def __init__(self):
        self.findings: list[LoopFinding] = []

    def run(self, program: ProgramNode) -> list[LoopFinding]:
        self.findings = []
        self.visit(program)
        return self.findings

    def visit_DoStatement(self, node: DoStatement):
        has_check = any(isinstance(stmt, CheckStatement) for stmt in node.body)
        self.findings.append(LoopFinding(len(self.findings) + 1, has_check, node.location))
        self.visit_statements(node.body)

    def visit_IfStatement(self, node: IfStatement):
        self.visit_statements(node.body)

    # Expressions hold no statements
    def visit_AssignStatement(self, node):
        pass

    def visit_WriteStatement(self, node):
        pass

    def visit_CheckStatement(self, node):
        pass


class CheckInDoVisitor(ASTVisitor):
    """Numbers 'check' statements in pre-order and records whether each sits in a do body."""

    def __init__(self):
        self.findings: list[CheckFinding] = []
        self._in_do = False

    def run(self, program: ProgramNode) -> list[CheckFinding]:
        self.findings = []
        self._in_do = False
        self.visit(program)
        return self.findings

    def _body(self, statements: list[Statement], in_do: bool) -> None:
        saved = self._in_do
        self._in_do = in_do
        self.visit_statements(statements)
        self._in_do = saved

    def visit_DoStatement(self, node: DoStatement):
        self._body(node.body, True)

    def visit_IfStatement(self, node: IfStatement):
        self._body(node.body, False)

    def visit_CheckStatement(self, node: CheckStatement):
        self.findings.append(CheckFinding(len(self.findings) + 1, self._in_do, node.location))

    def visit_AssignStatement(self, node):
        pass

    def visit_WriteStatement(self, node):
        pass


# =============================================================================
# Checker
# =============================================================================

class LoopChecker:
    """
    Runs both loop checks over a program.

    Example:
        checker = LoopChecker()
        report = checker.check(program)
        if not report.ok:
            print("\\n".join(report.lines()))
    """

    def check(self, program: ProgramNode) -> LoopReport:
        report = LoopReport(
            loops=self.do_has_check(program),
            checks=self.check_in_do(program),
        )
        logger.debug(
            f"Loop checks: {len(report.loops)} loops, {len(report.checks)} checks, "
            f"ok={report.ok}"
        )
        return report

    def do_has_check(self, program: ProgramNode) -> list[LoopFinding]:
        return DoHasCheckVisitor().run(program)

    def check_in_do(self, program: ProgramNode) -> list[CheckFinding]:
        return CheckInDoVisitor().run(program)


def check_loops(program: ProgramNode) -> LoopReport:
    """Convenience wrapper: run both loop checks on a program."""
    return LoopChecker().check(program)
