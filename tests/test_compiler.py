"""
Compiler Driver and CLI Tests
=============================

Tests for the CalcCompiler pipeline, CompilerOptions (including the
environment overrides) and the calcc command-line tool.
"""

import pytest
from click.testing import CliRunner

from calclang import __version__
from calclang.calc.compiler import (
    CalcCompiler,
    CompilerOptions,
    CompilerResult,
    compile_calc,
)
from calclang.calc.errors import LexicalError
from calclang.cli.calcc import main
from calclang.cli.errors import ExitCode


LOOP_PROGRAM = """\
read n
i := 0
do
    check i < n
    write i * i
    i := i + 1
od
"""


# =============================================================================
# Compiler Pipeline
# =============================================================================

class TestCompiler:
    """Tests for CalcCompiler.compile_source and friends."""

    def test_clean_program(self):
        """An error-free program produces every output."""
        result = CalcCompiler().compile_source(LOOP_PROGRAM, "loop.calc")
        assert isinstance(result, CompilerResult)
        assert not result.had_error
        assert result.diagnostics == []
        assert result.ast_text.startswith("(program\n")
        assert result.check_lines == ["do [1] has check in it", "check [1] is in do"]
        assert "while(1) {" in result.c_code
        assert "int i;\nint n;\n" in result.c_code

    def test_syntax_error_suppresses_only_ast(self):
        """After a syntax error the checks and C code are still produced."""
        result = CalcCompiler().compile_source("do check a ? od", "bad.calc")
        assert result.had_error
        assert result.ast_text is None
        assert result.check_lines == ["do [1] has check in it", "check [1] is in do"]
        assert "while(1)" in result.c_code
        assert result.diagnostics

    def test_invalid_character_reported_first(self):
        """The lexer diagnostic precedes the parser error it causes."""
        result = CalcCompiler().compile_source("read a ?", "bad.calc")
        assert result.had_error
        assert result.ast_text is None
        assert result.diagnostics[0].startswith("InvalidCharacterError at line 1")

    def test_diagnostics_in_source_order(self):
        """One diagnostic line per error, in the order they occur."""
        result = CalcCompiler().compile_source("x 1\nread 2\n", "bad.calc")
        assert result.diagnostics == [
            "StatementError at line 1: unexpected '1' in stmt",
            "StatementError at line 2: unexpected '2' in stmt",
        ]

    def test_lexical_error_propagates(self):
        """A fatal lexical error is raised to the caller."""
        with pytest.raises(LexicalError):
            CalcCompiler().compile_source("x := 12ab", "bad.calc")

    def test_compiler_reusable(self):
        """Errors from one compilation do not leak into the next."""
        compiler = CalcCompiler()
        assert compiler.compile_source("read", "a.calc").had_error
        assert not compiler.compile_source("read a", "b.calc").had_error

    def test_report(self):
        """The full report summarises the last compilation."""
        compiler = CalcCompiler()
        compiler.compile_source("x 1", "bad.calc")
        assert "1 error, 0 warnings" in compiler.report()

    def test_compile_file(self, tmp_path):
        """compile_file reads the source from disk."""
        source = tmp_path / "double.calc"
        source.write_text("read n write n * 2")
        result = CalcCompiler().compile_file(str(source))
        assert result.filename == str(source)
        assert 'scanf("%d", &n);' in result.c_code

    def test_compile_missing_file(self, tmp_path):
        """A missing file raises FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            CalcCompiler().compile_file(str(tmp_path / "missing.calc"))

    def test_compile_calc(self):
        """compile_calc returns the C code directly."""
        assert "int x;" in compile_calc("x := 1")


# =============================================================================
# Options
# =============================================================================

class TestCompilerOptions:
    """Tests for stage switches and environment configuration."""

    def test_defaults(self):
        """Every stage is enabled by default."""
        options = CompilerOptions()
        assert options.print_ast
        assert options.run_checks
        assert options.emit_code
        assert options.output_path is None

    def test_stages_can_be_disabled(self):
        """Disabled stages leave their outputs empty."""
        options = CompilerOptions(print_ast=False, run_checks=False, emit_code=False)
        result = CalcCompiler(options).compile_source("do check a od")
        assert result.ast_text is None
        assert result.loop_report is None
        assert result.check_lines == []
        assert result.c_code == ""

    def test_from_env(self, monkeypatch):
        """Environment variables switch stages off and set the output."""
        monkeypatch.setenv("CALCC_NO_AST", "1")
        monkeypatch.setenv("CALCC_NO_CHECKS", "true")
        monkeypatch.setenv("CALCC_OUTPUT", "out.c")
        monkeypatch.delenv("CALCC_NO_CODEGEN", raising=False)
        options = CompilerOptions.from_env()
        assert not options.print_ast
        assert not options.run_checks
        assert options.emit_code
        assert options.output_path == "out.c"

    def test_from_env_ignores_false_values(self, monkeypatch):
        """Values other than true-ish ones leave the default."""
        monkeypatch.setenv("CALCC_NO_CODEGEN", "0")
        assert CompilerOptions.from_env().emit_code


# =============================================================================
# Command-Line Interface
# =============================================================================

class TestCalccCli:
    """Tests for the calcc command."""

    @pytest.fixture(autouse=True)
    def clean_env(self, monkeypatch):
        for name in ("CALCC_NO_AST", "CALCC_NO_CHECKS", "CALCC_NO_CODEGEN", "CALCC_OUTPUT"):
            monkeypatch.delenv(name, raising=False)

    def test_cli_help(self):
        """--help describes the tool."""
        result = CliRunner().invoke(main, ["--help"])
        assert result.exit_code == 0
        assert "Compile a calculator language program to C" in result.output

    def test_cli_version(self):
        """--version prints the package version."""
        result = CliRunner().invoke(main, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output

    def test_cli_basic_compilation(self, tmp_path):
        """A clean program prints the AST and checks and writes the C file."""
        source = tmp_path / "loop.calc"
        source.write_text(LOOP_PROGRAM)

        result = CliRunner().invoke(main, [str(source)])

        assert result.exit_code == ExitCode.SUCCESS
        assert result.stdout.startswith("(program\n")
        assert "do [1] has check in it" in result.stdout
        assert "check [1] is in do" in result.stdout
        output = tmp_path / "loop.c"
        assert output.exists()
        assert output.read_text().startswith("#include <stdio.h>")

    def test_cli_output_option(self, tmp_path):
        """-o chooses the output file."""
        source = tmp_path / "prog.calc"
        source.write_text("x := 1")
        target = tmp_path / "custom.c"

        result = CliRunner().invoke(main, [str(source), "-o", str(target)])

        assert result.exit_code == 0
        assert target.exists()
        assert not (tmp_path / "prog.c").exists()

    def test_cli_syntax_error_recovers(self, tmp_path):
        """Syntax errors go to stderr and the exit code is still 0."""
        source = tmp_path / "bad.calc"
        source.write_text("do x 1 od")

        result = CliRunner().invoke(main, [str(source)])

        assert result.exit_code == ExitCode.SUCCESS
        assert "StatementError at line 1" in result.stderr
        assert "(program" not in result.stdout
        assert "do [1] has no check in it" in result.stdout
        assert (tmp_path / "bad.c").exists()

    def test_cli_lexical_error(self, tmp_path):
        """A fatal lexical error exits with the compile error code."""
        source = tmp_path / "bad.calc"
        source.write_text("x := 12ab")

        result = CliRunner().invoke(main, [str(source)])

        assert result.exit_code == ExitCode.COMPILE_ERROR
        assert "LexicalError" in result.stderr
        assert not (tmp_path / "bad.c").exists()

    def test_cli_missing_input(self, tmp_path):
        """A missing input file is an argument error."""
        result = CliRunner().invoke(main, [str(tmp_path / "missing.calc")])
        assert result.exit_code == ExitCode.INVALID_ARGS

    def test_cli_no_emit_c(self, tmp_path):
        """--no-emit-c skips writing the C file."""
        source = tmp_path / "prog.calc"
        source.write_text("x := 1")

        result = CliRunner().invoke(main, [str(source), "--no-emit-c"])

        assert result.exit_code == 0
        assert not (tmp_path / "prog.c").exists()

    def test_cli_no_ast_no_check(self, tmp_path):
        """--no-ast and --no-check silence stdout."""
        source = tmp_path / "prog.calc"
        source.write_text("do check a od")

        result = CliRunner().invoke(main, [str(source), "--no-ast", "--no-check"])

        assert result.exit_code == 0
        assert result.stdout == ""

    def test_cli_env_disables_ast(self, tmp_path):
        """CALCC_NO_AST turns the dump off unless --ast is given."""
        source = tmp_path / "prog.calc"
        source.write_text("x := 1")
        runner = CliRunner()

        result = runner.invoke(main, [str(source)], env={"CALCC_NO_AST": "1"})
        assert "(program" not in result.stdout

        result = runner.invoke(main, [str(source), "--ast"], env={"CALCC_NO_AST": "1"})
        assert "(program" in result.stdout

    def test_cli_tokens(self, tmp_path):
        """--tokens dumps the token stream without compiling."""
        source = tmp_path / "prog.calc"
        source.write_text("read n")

        result = CliRunner().invoke(main, [str(source), "--tokens"])

        assert result.exit_code == 0
        assert "Token(READ, 'read', 1:1)" in result.stdout
        assert "Token(EOF" in result.stdout
        assert not (tmp_path / "prog.c").exists()

    def test_cli_stdin(self):
        """'-' reads standard input and writes test.c."""
        runner = CliRunner()
        with runner.isolated_filesystem():
            result = runner.invoke(main, ["-"], input="read n write n")
            assert result.exit_code == 0
            with open("test.c") as f:
                assert "int n;" in f.read()
