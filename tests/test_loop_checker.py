"""
Loop Structure Check Tests
==========================

Tests for the do-has-check and check-in-do reports.
"""

from calclang.calc.parser import parse_source
from calclang.calc.loop_checker import LoopChecker, check_loops


def report_for(source: str):
    program, _ = parse_source(source, "test.calc")
    return check_loops(program)


class TestDoHasCheck:
    """Tests for the per-loop report."""

    def test_loop_with_check(self):
        """A check directly in the body counts."""
        report = report_for("do check a od")
        assert [str(f) for f in report.loops] == ["do [1] has check in it"]
        assert report.all_loops_have_check

    def test_loop_without_check(self):
        """A body with no check is reported."""
        report = report_for("do x := 1 od")
        assert [str(f) for f in report.loops] == ["do [1] has no check in it"]
        assert not report.all_loops_have_check
        assert not report.ok

    def test_empty_loop(self):
        """An empty loop has no check."""
        report = report_for("do od")
        assert report.loops[0].has_check is False

    def test_check_nested_in_if_does_not_count(self):
        """Only immediate checks count for a loop."""
        report = report_for("do if a check b fi od")
        assert [str(f) for f in report.loops] == ["do [1] has no check in it"]

    def test_loops_numbered_in_preorder(self):
        """Outer loops are numbered before the loops they contain."""
        report = report_for("do do x := 1 od check b od do check c od")
        assert [str(f) for f in report.loops] == [
            "do [1] has check in it",
            "do [2] has no check in it",
            "do [3] has check in it",
        ]

    def test_loops_inside_if_are_found(self):
        """If bodies are searched for loops."""
        report = report_for("if a do check b od fi")
        assert [str(f) for f in report.loops] == ["do [1] has check in it"]

    def test_loop_location(self):
        """Findings record where the loop starts."""
        report = report_for("read a\ndo check a od")
        assert report.loops[0].location.line == 2


class TestCheckInDo:
    """Tests for the per-check report."""

    def test_check_in_loop(self):
        """A check in a loop body is in a do."""
        report = report_for("do check a od")
        assert [str(f) for f in report.checks] == ["check [1] is in do"]
        assert report.all_checks_in_do

    def test_top_level_check(self):
        """A check at program level is not in a do."""
        report = report_for("check a")
        assert [str(f) for f in report.checks] == ["check [1] not in do"]
        assert not report.ok

    def test_check_in_if_inside_loop(self):
        """An if body is not a do body, even inside a loop."""
        report = report_for("do if a check b fi od")
        assert [str(f) for f in report.checks] == ["check [1] not in do"]

    def test_loop_inside_if(self):
        """A loop nested in an if is still a loop."""
        report = report_for("if a do check b od fi")
        assert [str(f) for f in report.checks] == ["check [1] is in do"]

    def test_checks_numbered_in_preorder(self):
        """Checks are numbered in source order across nesting."""
        report = report_for("do do check a od check b od check c")
        assert [str(f) for f in report.checks] == [
            "check [1] is in do",
            "check [2] is in do",
            "check [3] not in do",
        ]


class TestLoopReport:
    """Tests for the combined report."""

    def test_lines_loops_then_checks(self):
        """Loop lines come before check lines."""
        report = report_for("do check a od")
        assert report.lines() == ["do [1] has check in it", "check [1] is in do"]

    def test_no_loops_no_lines(self):
        """A program without loops or checks has nothing to report."""
        report = report_for("read a write a")
        assert report.lines() == []
        assert report.ok

    def test_numbering_restarts_each_run(self):
        """Every run numbers from 1 again."""
        program, _ = parse_source("do check a od do check b od")
        checker = LoopChecker()
        first = checker.check(program).lines()
        second = checker.check(program).lines()
        assert first == second
        assert first[0] == "do [1] has check in it"

    def test_runs_on_recovered_tree(self):
        """The checks run on a tree built after syntax errors."""
        program, had_error = parse_source("do ? od check a")
        assert had_error
        report = check_loops(program)
        assert report.lines() == ["do [1] has no check in it", "check [1] not in do"]
