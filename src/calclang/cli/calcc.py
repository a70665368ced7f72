"""
calcc - Calculator Language Compiler Command-Line Interface
===========================================================

This module implements the command-line interface for the calculator
language compiler.

Usage Examples
--------------
Basic compilation (writes loop.c):
    $ calcc loop.calc

With output file:
    $ calcc loop.calc -o out.c

From standard input (writes test.c):
    $ echo "read n write n * n" | calcc -

Token dump only:
    $ calcc --tokens loop.calc

Verbose mode (parser trace on stderr):
    $ calcc -v loop.calc

Output Streams
--------------
- stdout: the AST dump (error-free parses only) and the loop check lines
- stderr: one diagnostic line per syntax error, warnings, status messages
- output file: the generated C code
"""

from pathlib import Path
from typing import Optional
import logging

import click
from click.core import ParameterSource

from calclang import __version__
from calclang.calc.compiler import CalcCompiler, CompilerOptions
from calclang.calc.lexer import CalcLexer
from calclang.calc.errors import ErrorCollector
from calclang.cli.errors import handle_cli_exception

logger = logging.getLogger(__name__)

# Output file used when the program is read from stdin
STDIN_OUTPUT = "test.c"


def setup_logging(verbose: bool) -> None:
    """Configure logging based on verbosity."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(message)s" if verbose else "%(message)s",
    )


def _given(ctx: click.Context, name: str) -> bool:
    """True if the option was set on the command line rather than defaulted."""
    return ctx.get_parameter_source(name) == ParameterSource.COMMANDLINE


def _read_source(input_file: str) -> tuple[str, str]:
    """Return (source, filename) for a path or '-' (stdin)."""
    if input_file == "-":
        return click.get_text_stream("stdin").read(), "<stdin>"
    return Path(input_file).read_text(encoding="utf-8"), input_file


def _dump_tokens(source: str, filename: str) -> None:
    errors = ErrorCollector()
    lexer = CalcLexer(source, filename, errors=errors)
    for token in lexer.tokenize():
        click.echo(repr(token))
    for line in errors.diagnostic_lines():
        click.echo(line, err=True)


# =============================================================================
# CLI Definition
# =============================================================================

@click.command()
@click.argument(
    "input_file",
    type=click.Path(exists=True, dir_okay=False, allow_dash=True),
)
@click.option(
    "-o", "--output",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Output C file (default: input.c, or test.c for stdin)",
)
@click.option(
    "--ast/--no-ast",
    default=True,
    help="Print the AST when the program parsed without errors",
)
@click.option(
    "--check/--no-check",
    default=True,
    help="Report do/check loop structure",
)
@click.option(
    "--emit-c/--no-emit-c",
    default=True,
    help="Write the generated C code",
)
@click.option(
    "--tokens",
    is_flag=True,
    help="Print the token stream and exit (for debugging)",
)
@click.option(
    "-v", "--verbose",
    is_flag=True,
    help="Verbose output (parser trace)",
)
@click.version_option(version=__version__, prog_name="calcc")
def main(
    input_file: str,
    output: Optional[Path],
    ast: bool,
    check: bool,
    emit_c: bool,
    tokens: bool,
    verbose: bool,
) -> None:
    """
    Compile a calculator language program to C.

    INPUT_FILE is the program source, or '-' to read standard input.

    Syntax errors are reported on stderr and recovered from: the loop
    checks and the C code are still produced from the best-effort tree,
    but the AST is only printed for an error-free program.

    \b
    Examples:
        calcc loop.calc              # Outputs loop.c
        calcc loop.calc -o out.c     # Specify output file
        calcc --no-emit-c loop.calc  # AST and loop checks only
        calcc --tokens loop.calc     # Token dump

    \b
    Environment:
        CALCC_NO_AST, CALCC_NO_CHECKS, CALCC_NO_CODEGEN disable a stage
        CALCC_OUTPUT sets the default output file
        Command-line flags take precedence.
    """
    setup_logging(verbose)
    ctx = click.get_current_context()

    try:
        source, filename = _read_source(input_file)

        if tokens:
            _dump_tokens(source, filename)
            return

        # Environment first, then explicit flags
        options = CompilerOptions.from_env()
        if _given(ctx, "ast"):
            options.print_ast = ast
        if _given(ctx, "check"):
            options.run_checks = check
        if _given(ctx, "emit_c"):
            options.emit_code = emit_c
        if output is not None:
            options.output_path = str(output)

        logger.debug(f"Compiling {filename} with {options}")

        compiler = CalcCompiler(options)
        result = compiler.compile_source(source, filename)

        for line in result.diagnostics:
            click.echo(line, err=True)
        for warning in result.warnings:
            click.echo(warning, err=True)

        if result.ast_text is not None:
            click.echo(result.ast_text)

        for line in result.check_lines:
            click.echo(line)

        if options.emit_code:
            target = _output_path(options.output_path, input_file)
            target.write_text(result.c_code, encoding="utf-8")
            logger.info(f"Compiled {filename} -> {target}")

        if result.had_error:
            logger.info(f"{len(result.diagnostics)} syntax error(s) recovered")

    except Exception as e:
        handle_cli_exception(e, verbose)


def _output_path(configured: Optional[str], input_file: str) -> Path:
    if configured:
        return Path(configured)
    if input_file == "-":
        return Path(STDIN_OUTPUT)
    return Path(input_file).with_suffix(".c")


if __name__ == "__main__":
    main()
