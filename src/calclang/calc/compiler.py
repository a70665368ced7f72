"""
Calculator Language Compiler Main Module
========================================

This module provides the main compiler interface for the calculator
language. It orchestrates the complete compilation process:

    Source → Lex → Parse → (Print AST) → Loop Checks → Generate C

Usage
-----
Command line:
    $ calcc loop.calc -o loop.c

Programmatic:
    >>> from calclang.calc import compile_calc
    >>> c_code = compile_calc("read n\\nwrite n * 2")

Compilation Pipeline
--------------------
1. **Lexical Analysis**: tokens are pulled from the lexer on demand
2. **Parsing**: build the AST, recovering from syntax errors
3. **Printing**: dump the AST, only when the parse was error-free
4. **Loop Checks**: do/check structure report, always run
5. **Code Generation**: C translation unit, always produced

Error Handling
--------------
Syntax errors never stop the pipeline: the parser recovers, every error
is collected, and the later stages work on the best-effort tree. The
only fatal error is a LexicalError, which propagates to the caller.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional
import logging
import os

from calclang.calc.lexer import CalcLexer
from calclang.calc.parser import CalcParser
from calclang.calc.ast import ProgramNode, ASTPrinter
from calclang.calc.loop_checker import LoopChecker, LoopReport
from calclang.calc.codegen import CodeGenerator
from calclang.calc.errors import CalcSyntaxError, ErrorCollector

logger = logging.getLogger(__name__)

# Environment variables read by CompilerOptions.from_env()
ENV_NO_AST = "CALCC_NO_AST"
ENV_NO_CHECKS = "CALCC_NO_CHECKS"
ENV_NO_CODEGEN = "CALCC_NO_CODEGEN"
ENV_OUTPUT = "CALCC_OUTPUT"

_TRUE_VALUES = ("1", "true", "yes", "on")


@dataclass
class CompilerOptions:
    """
    Compiler configuration options.

    Attributes:
        print_ast: Produce the AST dump (error-free parses only)
        run_checks: Run the loop structure checks
        emit_code: Generate C code
        output_path: Where the CLI writes the C code (None = derived
                     from the input name)
    """
    print_ast: bool = True
    run_checks: bool = True
    emit_code: bool = True
    output_path: Optional[str] = None

    @classmethod
    def from_env(cls) -> "CompilerOptions":
        """
        Create CompilerOptions from environment variables.

        Environment variables (all optional):
            CALCC_NO_AST: Disable the AST dump when set to a true value
            CALCC_NO_CHECKS: Disable the loop checks
            CALCC_NO_CODEGEN: Disable C code generation
            CALCC_OUTPUT: Default output path for the generated C

        Returns:
            CompilerOptions with values from environment variables
        """
        options = cls()

        if _env_flag(ENV_NO_AST):
            options.print_ast = False

        if _env_flag(ENV_NO_CHECKS):
            options.run_checks = False

        if _env_flag(ENV_NO_CODEGEN):
            options.emit_code = False

        if output := os.environ.get(ENV_OUTPUT):
            options.output_path = output

        return options


def _env_flag(name: str) -> bool:
    return os.environ.get(name, "").strip().lower() in _TRUE_VALUES


@dataclass
class CompilerResult:
    """
    Result of a compilation.

    Attributes:
        filename: Source filename
        ast: The (possibly best-effort) program tree
        had_error: True if any syntax error was recovered from
        diagnostics: One line per error, in source order
        errors: The collected error objects
        warnings: Warning messages (code generation on recovery trees)
        ast_text: The AST dump; None after errors or when disabled
        loop_report: Loop check results (None when disabled)
        c_code: Generated C source ("" when disabled)
    """
    filename: str = ""
    ast: Optional[ProgramNode] = None
    had_error: bool = False
    diagnostics: list[str] = field(default_factory=list)
    errors: list[CalcSyntaxError] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    ast_text: Optional[str] = None
    loop_report: Optional[LoopReport] = None
    c_code: str = ""

    @property
    def check_lines(self) -> list[str]:
        if self.loop_report is None:
            return []
        return self.loop_report.lines()


class CalcCompiler:
    """
    Calculator language compiler.

    Example:
        compiler = CalcCompiler()
        result = compiler.compile_file("loop.calc")
        print(result.c_code)

    Attributes:
        options: Compiler configuration options
    """

    def __init__(self, options: Optional[CompilerOptions] = None):
        """
        Initialize the compiler.

        Args:
            options: Compiler configuration (uses defaults if None)
        """
        self.options = options or CompilerOptions()
        self._errors = ErrorCollector()

    def compile_source(self, source: str, filename: str = "<input>") -> CompilerResult:
        """
        Compile calculator language source.

        Args:
            source: Program text
            filename: Source filename for error messages

        Returns:
            CompilerResult with the tree, diagnostics and outputs

        Raises:
            LexicalError: On a fatal lexical error
        """
        self._errors.clear()
        result = CompilerResult(filename=filename)

        # Stages 1-2: lexing and parsing, interleaved
        ast, had_error = self._parse(source, filename)
        result.ast = ast
        result.had_error = had_error or self._errors.has_errors()

        # Stage 3: AST dump, suppressed by any error
        if self.options.print_ast and not result.had_error:
            result.ast_text = ASTPrinter().print(ast)

        # Stage 4: loop checks
        if self.options.run_checks:
            result.loop_report = LoopChecker().check(ast)

        # Stage 5: code generation
        if self.options.emit_code:
            result.c_code = CodeGenerator(self._errors).generate(ast)

        result.errors = list(self._errors.errors)
        result.warnings = list(self._errors.warnings)
        result.diagnostics = self._errors.diagnostic_lines()

        logger.debug(
            f"Compiled {filename}: {self._errors.error_count()} errors, "
            f"{self._errors.warning_count()} warnings"
        )
        return result

    def compile_file(self, filepath: str) -> CompilerResult:
        """
        Compile a calculator language source file.

        Raises:
            LexicalError: On a fatal lexical error
            FileNotFoundError: If the source file is not found
        """
        path = Path(filepath)
        if not path.exists():
            raise FileNotFoundError(f"Source file not found: {filepath}")

        source = path.read_text(encoding="utf-8")
        return self.compile_source(source, str(filepath))

    def report(self) -> str:
        """Full error and warning report of the last compilation."""
        return self._errors.report()

    def _parse(self, source: str, filename: str) -> tuple[ProgramNode, bool]:
        """Parse source into an AST, pulling tokens from the lexer on demand."""
        lexer = CalcLexer(source, filename, errors=self._errors)
        parser = CalcParser(lexer, filename, source.splitlines(), errors=self._errors)
        return parser.parse_program()


# =============================================================================
# Utility Functions
# =============================================================================

def compile_calc(source: str, filename: str = "<input>") -> str:
    """
    Compile calculator language source to C.

    Syntax errors are recovered from; the C code of the best-effort tree
    is returned.

    Raises:
        LexicalError: On a fatal lexical error
    """
    return CalcCompiler().compile_source(source, filename).c_code
